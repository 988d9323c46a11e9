"""
Bench command - time the iteration strategies against each other.
"""
import click
from rich.table import Table

from tidylab.bench import format_bytes, format_seconds
from tidylab.cli.helpers import run_command
from tidylab.console import console
from tidylab.iteration import compare_strategies


@click.command('bench')
@click.option('--n', 'n', default=1000, show_default=True, help='Number of squares to compute')
@click.option('--iterations', default=20, show_default=True, help='Runs per strategy')
def bench_command(n: int, iterations: int):
    """Compare loop, apply and vectorised strategies for computing n squares."""
    def work(tracker: dict):
        with console.status(f"Timing {iterations} runs per strategy..."):
            results = compare_strategies(n, iterations=iterations)
        tracker['fastest'] = results.sort_values('median')['expression'].iat[0]

        table = Table(title=f"Squares of 1..{n}")
        table.add_column("Strategy", style="bold")
        for header in ("Min", "Median", "Itr/sec", "Mem alloc"):
            table.add_column(header, justify="right")
        for row in results.itertuples(index=False):
            table.add_row(
                row.expression,
                format_seconds(row.min),
                format_seconds(row.median),
                f"{row.itr_per_sec:,.0f}",
                format_bytes(row.mem_alloc),
            )
        console.print(table)

    run_command('bench', {'n': n, 'iterations': iterations}, work)
