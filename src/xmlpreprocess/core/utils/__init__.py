"""Shared helpers for file access and XML handling."""
