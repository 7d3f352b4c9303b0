"""Excel 2003 XML (SpreadsheetML) settings files."""
from __future__ import annotations

import logging
from typing import List, Optional

from lxml import etree as ET

from ..exceptions import SettingsSourceError
from .base import FIRST_VALUE_ROW_DEFAULT, SettingsLayout, SettingsSource, SettingsTable

logger = logging.getLogger(__name__)

SS_NS = "urn:schemas-microsoft-com:office:spreadsheet"
X_NS = "urn:schemas-microsoft-com:office:excel"
NAMESPACES = {"ss": SS_NS, "x": X_NS}

_PROGID = 'progid="excel.sheet"'


def _int_attr(element: ET._Element, name: str) -> Optional[int]:
    raw = element.get(f"{{{SS_NS}}}{name}")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def is_spreadsheetml(root: ET._Element) -> bool:
    """True when the document carries the ``mso-application`` Excel PI."""
    for sibling in root.itersiblings(preceding=True):
        if isinstance(sibling, ET._ProcessingInstruction) and sibling.target == "mso-application":
            if (sibling.text or "").strip().lower() == _PROGID:
                return True
    return False


def _cell_value(cell: ET._Element) -> Optional[str]:
    data = cell.find("ss:Data", NAMESPACES)
    if data is None:
        return None
    value = "".join(data.itertext())
    if (data.get(f"{{{SS_NS}}}Type") or "").lower() == "boolean":
        if value == "0":
            return "False"
        if value == "1":
            return "True"
    return value


class SpreadsheetMLSettingsSource(SettingsSource):
    """Settings spreadsheet saved as "XML Spreadsheet 2003".

    Only the first worksheet is read. Sparse rows and cells (``ss:Index``)
    are expanded so the table lines up with the visible grid.
    """

    def read_table(self, layout: SettingsLayout) -> SettingsTable:
        parser = ET.XMLParser(resolve_entities=False)
        try:
            root = ET.parse(self.path, parser).getroot()
        except ET.XMLSyntaxError as e:
            raise SettingsSourceError(
                f"Error loading settings from {self.path}, {e}",
                context={"path": self.path},
            ) from e

        if not is_spreadsheetml(root):
            raise SettingsSourceError(
                "The input file is not a valid SpreadsheetML file or it is an unsupported version.",
                context={"path": self.path},
            )

        tables = root.xpath("//ss:Worksheet[1]/ss:Table", namespaces=NAMESPACES)
        if not tables:
            raise SettingsSourceError(
                "The input file does not contain a valid worksheet.",
                context={"path": self.path},
            )
        worksheet = tables[0]

        first_value_row: Optional[int] = None
        if layout.first_value_row == FIRST_VALUE_ROW_DEFAULT:
            splits = root.xpath(
                "//ss:Worksheet[1]/x:WorksheetOptions/x:SplitHorizontal/text()",
                namespaces=NAMESPACES,
            )
            if splits and str(splits[0]).strip().isdigit():
                first_value_row = int(str(splits[0]).strip()) + 1
                logger.debug("Frozen pane in %s: values start at row %d", self.path, first_value_row)

        rows: List[List[Optional[str]]] = []
        for row in worksheet.xpath(".//ss:Row", namespaces=NAMESPACES):
            row_index = _int_attr(row, "Index")
            if row_index is not None:
                while len(rows) < row_index - 1:
                    rows.append([])

            cells: List[Optional[str]] = []
            column = 0
            for cell in row.findall("ss:Cell", NAMESPACES):
                cell_index = _int_attr(cell, "Index")
                if cell_index is not None:
                    column = cell_index - 1
                while len(cells) <= column:
                    cells.append(None)
                value = _cell_value(cell)
                if value is not None:
                    cells[column] = value
                column += 1
            rows.append(cells)

        columns = _int_attr(worksheet, "ExpandedColumnCount") or max((len(r) for r in rows), default=0)
        table = SettingsTable(columns=columns, first_value_row=first_value_row)
        for cells in rows:
            table.add_row(cells)
        return table


__all__ = ["SpreadsheetMLSettingsSource", "is_spreadsheetml", "NAMESPACES"]
