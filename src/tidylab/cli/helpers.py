"""
Shared utility functions for tidylab CLI commands.
"""
import os
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
from rich.table import Table

from tidylab.conditions import evaluate
from tidylab.console import console
from tidylab.loader import download_file, load_table
from tidylab.printing import format_num
from tidylab.tracking import track_run


def split_list(value: Optional[str]) -> List[str]:
    """'a, b,c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [part.strip() for part in value.split(',') if part.strip()]


def resolve_input(file_path: Optional[str], url: Optional[str]) -> str:
    """Local path for a command input, downloading it first when given a URL."""
    if url:
        with console.status(f"Downloading {url}..."):
            return download_file(url)
    if not file_path:
        raise ValueError("Give a FILE or --url")
    return file_path


def read_input(file_path: str, sheet: Optional[str] = None) -> pd.DataFrame:
    return load_table(file_path, sheet=sheet)


def _cell(value: Any) -> str:
    if pd.isna(value):
        return "[dim]NA[/]"
    if isinstance(value, float):
        return format_num(value)
    if isinstance(value, pd.Timestamp):
        return value.strftime('%Y-%m-%d')
    return str(value)


def render_table(df: pd.DataFrame, title: str = '', max_rows: int = 50) -> Table:
    """Rich table of the first max_rows rows."""
    table = Table(title=title or None)
    for col in df.columns:
        numeric = pd.api.types.is_numeric_dtype(df[col])
        table.add_column(str(col), justify="right" if numeric else "left")

    for row in df.head(max_rows).itertuples(index=False, name=None):
        table.add_row(*(_cell(v) for v in row))

    if len(df) > max_rows:
        table.caption = f"{len(df) - max_rows} more rows"
    return table


def emit(df: pd.DataFrame, out: Optional[str], title: str = '') -> None:
    """Write df to `out` (.csv/.xlsx) or print it as a table."""
    if not out:
        console.print(render_table(df, title))
        return

    ext = os.path.splitext(out)[1].lower()
    if ext == '.csv':
        df.to_csv(out, index=False)
    elif ext == '.xlsx':
        df.to_excel(out, index=False, engine='openpyxl')
    else:
        raise ValueError(f"Unsupported output type: {ext}")
    console.print(f"[success]Wrote {len(df)} rows to {out}[/]")


def run_command(command: str, args: Dict[str, Any], work: Callable[[dict], Any]) -> Any:
    """
    Run a command body as one top-level evaluation.

    Buffered warnings are shown when the body finishes; an uncaught error is
    shown and turns into exit status 1.
    """
    with track_run(command, args) as tracker:
        ev = evaluate(lambda: work(tracker))
        tracker['status'] = 'ok' if ev.ok else 'error'
        tracker['warnings'] = len(ev.warnings)
    if not ev.ok:
        raise SystemExit(1)
    return ev.value
