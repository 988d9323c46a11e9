"""Workshop settings - environment driven, overridable per block."""
import os
from contextlib import contextmanager
from dataclasses import dataclass, asdict, fields
from typing import Generator, Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

# Warning policy levels, same numbering as the `warn` option of the workshop language
WARN_IGNORE = -1
WARN_BUFFERED = 0
WARN_IMMEDIATE = 1
WARN_FATAL = 2


@dataclass
class Settings:
    """Process-wide options"""
    warn: int = WARN_BUFFERED           # -1 ignore, 0 buffer, 1 immediate, 2 fatal
    digits: int = 7                     # significant digits for printed numbers
    log_level: str = 'WARNING'
    bench_iterations: int = 100         # default repetitions for bench.mark
    data_dir: str = './data'            # where case-study workbooks live

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Settings':
        # Missing keys fall back to defaults
        return cls(
            warn=int(data.get('warn', WARN_BUFFERED)),
            digits=int(data.get('digits', 7)),
            log_level=str(data.get('log_level', 'WARNING')).upper(),
            bench_iterations=int(data.get('bench_iterations', 100)),
            data_dir=data.get('data_dir', './data'),
        )


def load_settings() -> Settings:
    """Build settings from TIDYLAB_* environment variables."""
    data = {}
    for f in fields(Settings):
        value = os.getenv(f'TIDYLAB_{f.name.upper()}', '')
        if value:
            data[f.name] = value
    return Settings.from_dict(data)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the active settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


@contextmanager
def options(**overrides) -> Generator[Settings, None, None]:
    """
    Temporarily override settings.

    Usage:
        with options(warn=1):
            warn("shown straight away")
    """
    settings = get_settings()
    unknown = [k for k in overrides if not hasattr(settings, k)]
    if unknown:
        raise ValueError(f"Unknown options: {unknown}")

    previous = {k: getattr(settings, k) for k in overrides}
    for key, value in overrides.items():
        setattr(settings, key, value)
    try:
        yield settings
    finally:
        for key, value in previous.items():
            setattr(settings, key, value)
