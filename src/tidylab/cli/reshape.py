"""
Reshaping commands - read a region, pivot wider/longer, separate a column.
"""
from typing import Optional

import click

from tidylab.cli.helpers import emit, read_input, run_command, split_list
from tidylab.loader import read_region
from tidylab.transform import pivot_longer, pivot_wider, separate


@click.command('read')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.argument('cell_range')
@click.option('--sheet', help='Worksheet name (default: first sheet)')
@click.option('--no-header', is_flag=True, help='First row of the range is data, not headers')
@click.option('-o', '--out', help='Write to .csv/.xlsx instead of printing')
def read_command(file: str, cell_range: str, sheet: Optional[str], no_header: bool, out: Optional[str]):
    """Read a rectangular CELL_RANGE (e.g. B3:F20) of a workbook."""
    def work(tracker: dict):
        df = read_region(file, cell_range, sheet=sheet, col_names=not no_header)
        tracker['rows'] = len(df)
        emit(df, out, title=cell_range)

    run_command('read', {'file': file, 'range': cell_range, 'sheet': sheet}, work)


@click.command('wider')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--names-from', required=True, help='Column(s) whose values become headers (comma separated)')
@click.option('--values-from', required=True, help='Column(s) holding the values (comma separated)')
@click.option('--id-cols', help='Identifier columns (default: all other columns)')
@click.option('--fill', help='Value for missing combinations')
@click.option('--sheet', help='Worksheet name for .xlsx input')
@click.option('-o', '--out', help='Write to .csv/.xlsx instead of printing')
def wider_command(file: str, names_from: str, values_from: str, id_cols: Optional[str],
                  fill: Optional[str], sheet: Optional[str], out: Optional[str]):
    """Pivot a long table wider."""
    def work(tracker: dict):
        df = read_input(file, sheet)
        wide = pivot_wider(
            df,
            names_from=split_list(names_from),
            values_from=split_list(values_from),
            id_cols=split_list(id_cols) or None,
            values_fill=_fill_value(fill),
        )
        tracker['shape'] = [df.shape, wide.shape]
        emit(wide, out, title=f"{len(df)} rows -> {len(wide)} rows")

    run_command('wider', {'file': file, 'names_from': names_from, 'values_from': values_from}, work)


def _fill_value(fill: Optional[str]):
    if fill is None:
        return None
    try:
        return int(fill)
    except ValueError:
        try:
            return float(fill)
        except ValueError:
            return fill


@click.command('longer')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--cols', help='Columns to collapse (comma separated)')
@click.option('--prefix', help='Collapse every column starting with this prefix')
@click.option('--names-to', default='name', show_default=True)
@click.option('--values-to', default='value', show_default=True)
@click.option('--drop-na', is_flag=True, help='Drop rows whose value is missing')
@click.option('--sheet', help='Worksheet name for .xlsx input')
@click.option('-o', '--out', help='Write to .csv/.xlsx instead of printing')
def longer_command(file: str, cols: Optional[str], prefix: Optional[str], names_to: str,
                   values_to: str, drop_na: bool, sheet: Optional[str], out: Optional[str]):
    """Pivot a wide table longer."""
    if not cols and not prefix:
        raise click.UsageError("Give --cols or --prefix")

    def work(tracker: dict):
        df = read_input(file, sheet)
        selection = split_list(cols) if cols else (lambda c: str(c).startswith(prefix))
        long = pivot_longer(
            df, selection, names_to=names_to, values_to=values_to,
            names_prefix=prefix, values_drop_na=drop_na,
        )
        tracker['shape'] = [df.shape, long.shape]
        emit(long, out, title=f"{len(df)} rows -> {len(long)} rows")

    run_command('longer', {'file': file, 'cols': cols, 'prefix': prefix}, work)


@click.command('separate')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.argument('column')
@click.option('--into', required=True, help='New column names (comma separated)')
@click.option('--sep', default='/', show_default=True, help='Delimiter')
@click.option('--convert', is_flag=True, help='Convert numeric-looking fields to numbers')
@click.option('--extra', type=click.Choice(['warn', 'drop', 'merge']), default='warn', show_default=True)
@click.option('--fill', type=click.Choice(['warn', 'right', 'left']), default='warn', show_default=True)
@click.option('--sheet', help='Worksheet name for .xlsx input')
@click.option('-o', '--out', help='Write to .csv/.xlsx instead of printing')
def separate_command(file: str, column: str, into: str, sep: str, convert: bool,
                     extra: str, fill: str, sheet: Optional[str], out: Optional[str]):
    """Split COLUMN on a delimiter into fixed fields."""
    def work(tracker: dict):
        df = read_input(file, sheet)
        result = separate(df, column, split_list(into), sep=sep, convert=convert, extra=extra, fill=fill)
        tracker['rows'] = len(result)
        emit(result, out)

    run_command('separate', {'file': file, 'column': column, 'into': into}, work)
