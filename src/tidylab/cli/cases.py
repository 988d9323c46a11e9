"""
Case study commands - fruit prices and SMART ridership.
"""
from typing import Optional, Tuple

import click

from tidylab.casestudies import cheapest, extract_fruit_prices, read_ridership, tidy_ridership, yearly_totals
from tidylab.casestudies.fruit import DEFAULT_RANGE
from tidylab.cli.helpers import emit, resolve_input, run_command


@click.command('fruit')
@click.argument('files', nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option('--url', help='Download the workbook from this URL instead')
@click.option('--form', default='Fresh', show_default=True, help='Which form row to extract')
@click.option('--range', 'cell_range', default=DEFAULT_RANGE, show_default=True, help='Price table region')
@click.option('--top', type=int, help='Only show the N cheapest per cup')
@click.option('-o', '--out', help='Write to .csv/.xlsx instead of printing')
def fruit_command(files: Tuple[str, ...], url: Optional[str], form: str, cell_range: str,
                  top: Optional[int], out: Optional[str]):
    """Extract fruit prices from one or more workbooks."""
    def work(tracker: dict):
        paths = list(files) or [resolve_input(None, url)]
        prices = extract_fruit_prices(paths, form=form, cell_range=cell_range)
        if top:
            prices = cheapest(prices, top)
        tracker['fruits'] = len(prices)
        emit(prices, out, title=f"{form} fruit prices")

    run_command('fruit', {'files': list(files), 'url': url, 'form': form}, work)


@click.command('smart')
@click.argument('file', required=False, type=click.Path(exists=True, dir_okay=False))
@click.option('--range', 'cell_range', required=True, help='Region holding Month + FY columns, e.g. A1:E14')
@click.option('--url', help='Download the workbook from this URL instead')
@click.option('--sheet', help='Worksheet name (default: first sheet)')
@click.option('--fy-start', default=7, show_default=True, help='Month the fiscal year starts in')
@click.option('--totals', is_flag=True, help='Show one row per fiscal year with totals')
@click.option('-o', '--out', help='Write to .csv/.xlsx instead of printing')
def smart_command(file: Optional[str], cell_range: str, url: Optional[str], sheet: Optional[str],
                  fy_start: int, totals: bool, out: Optional[str]):
    """Reshape SMART ridership (months x fiscal years) into a tidy table."""
    def work(tracker: dict):
        path = resolve_input(file, url)
        tidy = tidy_ridership(read_ridership(path, cell_range, sheet=sheet), fy_start_month=fy_start)
        tracker['rows'] = len(tidy)
        if totals:
            emit(yearly_totals(tidy, fy_start_month=fy_start), out, title="Riders per fiscal year")
        else:
            emit(tidy, out, title="SMART ridership")

    run_command('smart', {'file': file, 'range': cell_range, 'url': url}, work)
