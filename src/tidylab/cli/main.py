"""
tidylab CLI - workshop helpers from the command line

Commands:
    sheets      List the sheets of a workbook
    read        Read a rectangular region of a sheet
    wider       Pivot a long table wider
    longer      Pivot a wide table longer
    separate    Split a delimited column into fields
    bench       Compare iteration strategies
    fruit       Fruit price case study
    smart       SMART ridership case study
"""
import logging

import click

from tidylab import __version__
from tidylab.cli.cases import fruit_command, smart_command
from tidylab.cli.perf import bench_command
from tidylab.cli.reshape import longer_command, read_command, separate_command, wider_command
from tidylab.cli.sheets import sheets_command
from tidylab.config import get_settings, options


@click.group()
@click.version_option(__version__, prog_name='tidylab')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging')
@click.option('--warn', 'warn_level', type=click.IntRange(-1, 2),
              help='Warning policy: -1 ignore, 0 defer, 1 immediate, 2 fatal')
@click.pass_context
def cli(ctx: click.Context, verbose: bool, warn_level):
    """tidylab - reshaping, conditions and timing helpers for the workshop"""
    settings = get_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')
    if warn_level is not None:
        ctx.with_resource(options(warn=warn_level))


cli.add_command(sheets_command)
cli.add_command(read_command)
cli.add_command(wider_command)
cli.add_command(longer_command)
cli.add_command(separate_command)
cli.add_command(bench_command)
cli.add_command(fruit_command)
cli.add_command(smart_command)


if __name__ == '__main__':
    cli()
