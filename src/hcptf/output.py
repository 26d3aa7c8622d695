"""Output rendering for hcptf commands.

A Formatter renders either human-oriented tables (via rich) or JSON,
selected by the uniform ``-output`` flag. Unknown formats fall back to table.
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

FORMAT_TABLE = "table"
FORMAT_JSON = "json"


def format_value(value: Any) -> str:
    """Convert a value to a short human-readable string."""
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


class Formatter:
    def __init__(
        self,
        format: Optional[str] = FORMAT_TABLE,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ) -> None:
        fmt = (format or FORMAT_TABLE).lower()
        self.format = fmt if fmt in (FORMAT_TABLE, FORMAT_JSON) else FORMAT_TABLE
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    @property
    def is_json(self) -> bool:
        return self.format == FORMAT_JSON

    def _console(self, width: Optional[int] = None) -> Console:
        isatty = getattr(self.out, "isatty", lambda: False)()
        return Console(
            file=self.out,
            width=None if isatty else width,
            highlight=False,
            soft_wrap=not isatty,
        )

    def table(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
        rows = [[format_value(v) for v in row] for row in rows]
        if self.is_json:
            self.json([dict(zip(headers, row)) for row in rows])
            return

        tbl = Table(*headers, box=box.SIMPLE, header_style="bold cyan")
        for column in tbl.columns:
            column.overflow = "fold"
        for row in rows:
            tbl.add_row(*(Text(cell) for cell in row))

        # Wide enough that piped output is never truncated
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row[: len(widths)]):
                widths[i] = max(widths[i], len(cell))
        self._console(width=max(80, sum(widths) + 3 * len(widths) + 4)).print(tbl)

    def key_value(self, data: Mapping[str, Any]) -> None:
        if self.is_json:
            self.json(dict(data))
            return
        if not data:
            return
        pad = max(len(k) for k in data)
        for key, value in data.items():
            self.out.write(f"{key}:{' ' * (pad - len(key))} {format_value(value)}\n")

    def json(self, data: Any) -> None:
        self.out.write(json.dumps(data, indent=2, default=str))
        self.out.write("\n")

    def list(self, items: Iterable[str]) -> None:
        items = list(items)
        if self.is_json:
            self.json(items)
            return
        for item in items:
            self.out.write(f"{item}\n")

    def message(self, text: str) -> None:
        self.out.write(f"{text}\n")

    def api_response(self, document: Optional[Dict[str, Any]]) -> None:
        """Render a raw JSON:API document."""
        if self.is_json:
            self.json(document if document is not None else {})
            return
        data = (document or {}).get("data")
        if not data:
            self.message("No data returned")
            return
        if isinstance(data, dict):
            record = {"ID": data.get("id"), "Type": data.get("type")}
            record.update(data.get("attributes") or {})
            self.key_value(record)
            return
        headers, rows = api_data_rows(data)
        self.table(headers, rows)


def api_data_rows(items: List[Dict[str, Any]]):
    """Headers and rows for a JSON:API data array: ID, Type, sorted attributes."""
    keys = sorted({k for item in items for k in (item.get("attributes") or {})})
    headers = ["ID", "Type"] + keys
    rows = []
    for item in items:
        attrs = item.get("attributes") or {}
        rows.append([item.get("id"), item.get("type")] + [attrs.get(k) for k in keys])
    return headers, rows
