"""
tidylab CLI module - command registration.
"""
from tidylab.cli.main import cli
from tidylab.cli.helpers import (
    split_list,
    render_table,
    emit,
    run_command,
)

__all__ = [
    'cli',
    'split_list',
    'render_table',
    'emit',
    'run_command',
]
