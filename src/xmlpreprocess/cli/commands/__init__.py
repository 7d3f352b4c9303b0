"""Top-level commands, discovered by :mod:`xmlpreprocess.cli._dispatcher`."""
