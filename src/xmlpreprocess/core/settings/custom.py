"""Settings produced by an external command.

The command line may contain ``@tempFile@``; it is replaced with the path of
a temporary file the command is expected to fill with CSV settings.
"""
from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from typing import List

from ..exceptions import SettingsSourceError
from .base import SettingsLayout, SettingsSource, SettingsTable
from .csv_reader import CsvSettingsSource

logger = logging.getLogger(__name__)

TEMP_FILE_MARKER = "@tempFile@"


class CustomSettingsSource(SettingsSource):
    """Run a command and read the CSV file it writes."""

    kind = "custom"
    requires_row_fixup = True

    def exists(self) -> bool:
        return bool(self.command())

    def command(self) -> List[str]:
        return shlex.split(self.path.strip(), posix=os.name != "nt")

    def read_table(self, layout: SettingsLayout) -> SettingsTable:
        fd, temp_file = tempfile.mkstemp(suffix=".csv")
        os.close(fd)
        try:
            args = [arg.replace(TEMP_FILE_MARKER, temp_file) for arg in self.command()]
            logger.info("Running settings command: %s", " ".join(args))
            try:
                completed = subprocess.run(args, stdout=subprocess.PIPE, text=True, check=False)
            except OSError as e:
                raise SettingsSourceError(
                    f"Error loading settings from {self.path}, {e}",
                    context={"command": self.path},
                ) from e
            if completed.stdout:
                logger.info("Settings command output:\n%s", completed.stdout.rstrip())
            if completed.returncode != 0:
                logger.warning("Settings command exited with code %d", completed.returncode)
            return CsvSettingsSource(temp_file).read_table(layout)
        finally:
            if os.path.exists(temp_file):
                os.remove(temp_file)


__all__ = ["CustomSettingsSource", "TEMP_FILE_MARKER"]
