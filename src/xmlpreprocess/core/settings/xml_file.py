"""XML settings files.

    <settings>
      <property name="port">8080</property>
      <property name="server">
        <environment name="default">localhost</environment>
        <environment name="Production">prod01</environment>
      </property>
    </settings>
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

from lxml import etree as ET

from ..exceptions import SettingsSourceError


def _inner_text(element: ET._Element) -> str:
    return "".join(element.itertext())


def _elements(parent: ET._Element) -> List[ET._Element]:
    return [child for child in parent if isinstance(child.tag, str)]


def read_settings_file(
    path: Union[str, Path],
    environment: Optional[str],
) -> List[Tuple[str, Optional[str]]]:
    """Read ``(name, value)`` pairs for ``environment`` from an XML settings file.

    A property with child elements picks the child whose ``name`` matches the
    environment (case-insensitive); children named ``default...`` supply the
    fallback. Properties without a ``name`` are skipped.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        SettingsSourceError: If the file is not well-formed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f'Settings data source not found: "{path}"')
    try:
        root = ET.parse(str(path), ET.XMLParser(resolve_entities=False)).getroot()
    except ET.XMLSyntaxError as e:
        raise SettingsSourceError(
            f"Error loading settings from {path}, {e}",
            context={"path": str(path)},
        ) from e

    wanted = (environment or "").lower()
    pairs: List[Tuple[str, Optional[str]]] = []
    for prop in _elements(root):
        name = prop.get("name") or ""
        children = _elements(prop)
        value: Optional[str] = None
        if not children:
            value = _inner_text(prop)
        else:
            for env in children:
                env_name = (env.get("name") or "").lower()
                if wanted and env_name == wanted:
                    value = _inner_text(env)
                    break
                if env_name.startswith("default"):
                    value = _inner_text(env)
        if name:
            pairs.append((name, value))
    return pairs


__all__ = ["read_settings_file"]
