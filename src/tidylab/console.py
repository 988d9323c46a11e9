"""
Shared Rich consoles and theme.

`console` writes results to stdout, `err_console` carries messages,
warnings and errors to stderr. Condition kinds double as style names.
"""
from rich.console import Console
from rich.theme import Theme

# Dark blue for results; conditions stand out by kind
custom_theme = Theme({
    "success": "blue",
    "dim": "blue",
    "message": "blue",
    "warning": "bold yellow",
    "error": "bold red",
    "table.header": "bold blue",
})

console = Console(theme=custom_theme, highlight=False)
err_console = Console(theme=custom_theme, highlight=False, stderr=True)
