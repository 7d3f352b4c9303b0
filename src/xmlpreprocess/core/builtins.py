"""Built-in ``_`` properties registered before each file is processed."""
from __future__ import annotations

import getpass
import logging
import os
import platform
import re
import socket
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from .context import ProcessingContext

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")


def _machine_name() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return platform.node()


def _user_name() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        # No login name and no USER/LOGNAME variable.
        return ""


def _system_dir() -> str:
    if sys.platform == "win32":
        root = os.environ.get("SystemRoot", r"C:\Windows")
        return str(Path(root) / "System32")
    return "/usr/bin"


def _dir_and_root(path: Optional[Path]) -> tuple[str, str]:
    if path is None:
        return "", ""
    resolved = Path(path).absolute()
    return str(resolved.parent), resolved.anchor


def builtin_properties(context: ProcessingContext, now: Optional[datetime] = None) -> Dict[str, str]:
    """Compute the built-in properties for the current file.

    Args:
        context: Session whose environment name and destination are used
        now: Timestamp for ``_system_date``/``_system_time`` (defaults to now)

    Returns:
        Ordered mapping of property name to value
    """
    now = now or datetime.now()
    props: Dict[str, str] = {"_xml_preprocess": ""}

    if context.environment_name:
        props["_environment_name"] = context.environment_name

    dest_dir, dest_root = _dir_and_root(context.destination_file)
    props["_dest_dir"] = dest_dir
    props["_dest_root"] = dest_root

    machine_name = _machine_name()
    props["_machine_name"] = machine_name
    match = _DIGITS.search(machine_name)
    props["_machine_id"] = match.group(0) if match else machine_name

    props["_os_platform"] = platform.system()
    props["_os_version"] = platform.release()

    system_dir = _system_dir()
    props["_system_dir"] = system_dir
    props["_system_root"] = Path(system_dir).anchor

    current_dir = os.getcwd()
    props["_current_dir"] = current_dir
    props["_current_root"] = Path(current_dir).anchor

    props["_python_version"] = platform.python_version()
    props["_python_dir"] = sys.prefix

    props["_user_name"] = _user_name()
    props["_user_domain_name"] = os.environ.get("USERDOMAIN", "")
    props["_user_interactive"] = str(bool(sys.stdin and sys.stdin.isatty()))

    props["_system_date"] = now.strftime("%Y-%m-%d")
    props["_system_time"] = now.strftime("%H:%M:%S")

    for name, value in os.environ.items():
        props[f"_env_{name.lower()}"] = value

    return props


def add_builtin_properties(context: ProcessingContext, now: Optional[datetime] = None) -> None:
    """Register the built-in properties in ``context.properties``."""
    props = builtin_properties(context, now)
    context.properties.load(props.items())
    logger.debug("Registered %d built-in properties", len(props))


__all__ = ["builtin_properties", "add_builtin_properties"]
