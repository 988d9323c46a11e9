"""
Sheets command - list the worksheets of a workbook.
"""
from pathlib import Path

import click
from rich.table import Table

from tidylab.cli.helpers import run_command
from tidylab.console import console
from tidylab.loader import describe_sheets


def display_sheet_table(sheets: list, filename: str) -> None:
    """Display a table of sheets with their used ranges."""
    table = Table(title=f"Sheets in {filename}")
    table.add_column("#", style="dim", width=3)
    table.add_column("Sheet Name", style="bold")
    table.add_column("Range")
    table.add_column("Rows", justify="right")
    table.add_column("Cols", justify="right")

    for i, sheet in enumerate(sheets, 1):
        table.add_row(
            str(i), sheet['name'], sheet['range'] or "-",
            str(sheet['rows']) if sheet['rows'] > 0 else "-",
            str(sheet['cols']) if sheet['cols'] > 0 else "-",
        )
    console.print(table)


@click.command('sheets')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def sheets_command(file: str):
    """List the sheets of a workbook with their used ranges."""
    def work(tracker: dict):
        sheets = describe_sheets(file)
        tracker['sheet_count'] = len(sheets)
        display_sheet_table(sheets, Path(file).name)

    run_command('sheets', {'file': file}, work)
