"""
Configuration management (YAML, validated with jsonschema).

Precedence (in increasing order):
  1) Bundled defaults (``xmlpreprocess/data/config/defaults.yaml``)
  2) Project overlay (``xmlpreprocess.yaml`` in the working directory, or an
     explicit ``--config`` file)
  3) Environment overrides (``XMLPP_*``)

Environment overrides:
- Path separator: double underscore ``__`` (e.g., ``XMLPP_TOKENS__START=$(``).
- Case handling: case-insensitive lookup against existing keys; new keys keep
  their case so camelCase names like ``processing.preserveMarkup`` survive.
- Type coercion: bool/int/float/JSON-like strings are coerced.

Command-line flags are applied by the CLI on top of the loaded configuration.
"""
from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema
import yaml

from ..data import get_data_path, read_json
from .exceptions import ConfigurationError

ENV_PREFIX = "XMLPP_"
PROJECT_CONFIG_NAME = "xmlpreprocess.yaml"
SCHEMA_NAME = "config.schema.json"


class ConfigManager:
    """Load, merge, and validate configuration.

    Typical usage:

    ```python
    from xmlpreprocess.core.config import ConfigManager
    cfg = ConfigManager().load_config(validate=True)
    cfg["tokens"]["start"]  # "${"
    ```

    Attributes:
        project_root: Directory searched for ``xmlpreprocess.yaml``.
        config_path: Explicit overlay file, when given.
        core_config_dir: Directory holding the bundled ``defaults.yaml``.
    """

    def __init__(self, project_root: Optional[Path] = None, config_path: Optional[Path] = None) -> None:
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.config_path = Path(config_path) if config_path else None
        self.core_config_dir = get_data_path("config")
        self.core_defaults_path = self.core_config_dir / "defaults.yaml"

    # ---------- Merge helpers ----------
    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge ``override`` into ``base`` returning a copy.

        Dicts are merged recursively; any other value replaces the base value.
        """
        result: Dict[str, Any] = dict(base)
        for key, value in (override or {}).items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    # ---------- IO helpers ----------
    def load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML file into a dict.

        Returns:
            Parsed YAML or an empty dict when the file does not exist.

        Raises:
            ConfigurationError: If the file contains invalid YAML or is not a mapping.
        """
        if not path.exists():
            return {}
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}", context={"path": str(path)}) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {path} must contain a mapping",
                context={"path": str(path)},
            )
        return data

    def overlay_path(self) -> Optional[Path]:
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {self.config_path}",
                    context={"path": str(self.config_path)},
                )
            return self.config_path
        candidate = self.project_root / PROJECT_CONFIG_NAME
        return candidate if candidate.exists() else None

    # ---------- Validation ----------
    def validate_schema(self, config: Dict[str, Any], schema_name: str = SCHEMA_NAME) -> None:
        """Validate configuration against a bundled JSON schema.

        Raises:
            ConfigurationError: If validation fails.
        """
        schema = read_json("schemas", schema_name)
        try:
            jsonschema.validate(instance=config, schema=schema)
        except jsonschema.ValidationError as e:
            location = ".".join(str(p) for p in e.absolute_path) or "<root>"
            raise ConfigurationError(
                f"Invalid configuration at {location}: {e.message}",
                context={"path": location},
            ) from e

    # ---------- Type coercion helpers ----------
    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        """Coerce string to bool/int/float/JSON when appropriate.

        Falls back to the original string when no coercion applies. Token
        delimiters such as ``${`` are never numbers, so they pass through.
        """
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value

    # ---------- Environment overrides ----------
    def _iter_env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[str], Any]]:
        """Yield ``(path, typed_value)`` for every ``XMLPP_*`` variable.

        Raises:
            ConfigurationError: In strict mode, for keys with empty segments
        """
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            segments = raw.split("__")
            if not raw or any(seg == "" for seg in segments):
                if strict:
                    raise ConfigurationError(
                        f"Malformed {ENV_PREFIX}* key: '{key}'. Use double underscores between parts.",
                        context={"key": key},
                    )
                continue
            yield segments, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        """Set ``value`` at ``path`` creating dicts as needed.

        Existing keys are matched case-insensitively.
        """
        current = root
        for index, part in enumerate(path):
            lower_map = {k.lower(): k for k in current.keys() if isinstance(k, str)}
            key = lower_map.get(part.lower(), part)
            if index == len(path) - 1:
                current[key] = value
                return
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool) -> None:
        """Apply ``XMLPP_*`` overrides in-place to ``cfg``."""
        for path, typed_value in self._iter_env_overrides(strict=strict):
            self._set_nested(cfg, path, typed_value)

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration with correct precedence and optional validation.

        Precedence (lowest to highest): defaults, project overlay, env.

        Args:
            validate: When ``True`` (default), validate the merged configuration
                against the bundled schema and treat malformed env keys as errors.

        Returns:
            Fully merged configuration.
        """
        cfg = self.load_yaml(self.core_defaults_path)

        overlay = self.overlay_path()
        if overlay is not None:
            cfg = self.deep_merge(cfg, self.load_yaml(overlay))

        self.apply_env_overrides(cfg, strict=validate)

        if validate:
            self.validate_schema(cfg)
        return cfg


__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_NAME"]
