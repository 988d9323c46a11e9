"""tidylab - reshaping, conditions, debugging and timing helpers for the workshop."""

__version__ = '0.3.0'

from .conditions import (
    evaluate,
    message,
    stop,
    suppress_messages,
    suppress_warnings,
    try_,
    try_catch,
    warn,
    with_calling_handlers,
)
from .config import get_settings, options
from .printing import cat, fmt, format_num, show
from .transform import pivot_longer, pivot_wider, separate, unite
from .loader import read_region
from .bench import mark, system_time
