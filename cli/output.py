"""
cli/output.py - 쿼리 결과 출력

결과 행을 table(rich) / json / csv 형식으로 출력하거나 파일로 저장합니다.

Example:
    from cli.output import OutputFormat, write_rows

    write_rows(rows, ["name", "region"], OutputFormat.JSON, path="result.json")
"""

from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from cli.ui.console import console


class OutputFormat(str, Enum):
    """출력 형식"""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _cell(value: Any) -> str:
    """테이블/CSV 셀 문자열 (dict/list는 JSON, None은 빈 문자열)"""
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=_json_default)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_json(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, ensure_ascii=False, indent=2, default=_json_default)


def to_csv(rows: list[dict[str, Any]], columns: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(col)) for col in columns])
    return buffer.getvalue()


def build_table(rows: list[dict[str, Any]], columns: list[str], title: str | None = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*[_cell(row.get(col)) for col in columns])
    return table


def write_rows(
    rows: list[dict[str, Any]],
    columns: list[str],
    fmt: OutputFormat = OutputFormat.TABLE,
    path: str | Path | None = None,
    title: str | None = None,
) -> None:
    """결과 행 출력

    Args:
        rows: 결과 행
        columns: 출력 컬럼 순서
        fmt: 출력 형식
        path: 저장 경로 (None이면 표준 출력)
        title: table 형식 제목
    """
    fmt = OutputFormat(fmt)

    if fmt is OutputFormat.TABLE:
        table = build_table(rows, columns, title)
        if path is None:
            console.print(table)
            return
        with open(path, "w", encoding="utf-8") as f:
            Console(file=f, width=200, color_system=None).print(table)
        return

    text = to_json(rows) if fmt is OutputFormat.JSON else to_csv(rows, columns)
    if path is None:
        # rich 마크업 해석 없이 그대로 출력
        click.echo(text, nl=not text.endswith("\n"))
        return
    Path(path).write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
