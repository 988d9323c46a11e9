"""
CLI run tracking - logs every command execution.

Each run gets an id, a start record, and a success or failure record with
its duration. Records go to the standard logging system only.
"""
import json
import logging
import os
import socket
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

logger = logging.getLogger(__name__)


def _get_context() -> Dict[str, str]:
    """Get execution context (hostname, username)."""
    return {
        'hostname': socket.gethostname(),
        'username': os.getenv('USER') or os.getenv('USERNAME') or 'unknown',
    }


def start_run(command: str, args: Dict[str, Any]) -> str:
    """Record the start of a CLI command execution. Returns the run id."""
    run_id = uuid.uuid4().hex[:12]
    ctx = _get_context()
    logger.info(
        f"run {run_id} started: {command} {json.dumps(args, default=str)} "
        f"({ctx['username']}@{ctx['hostname']})"
    )
    return run_id


def complete_run(run_id: str, duration: float, result_summary: Optional[Dict[str, Any]] = None) -> None:
    """Record successful completion of a CLI command."""
    summary = json.dumps(result_summary, default=str) if result_summary else '{}'
    logger.info(f"run {run_id} succeeded in {duration * 1000:.0f} ms: {summary}")


def fail_run(
    run_id: str,
    duration: float,
    error_message: str,
    result_summary: Optional[Dict[str, Any]] = None,
) -> None:
    """Record failed completion of a CLI command."""
    summary = json.dumps(result_summary, default=str) if result_summary else '{}'
    logger.warning(f"run {run_id} failed after {duration * 1000:.0f} ms: {error_message} {summary}")


@contextmanager
def track_run(command: str, args: Dict[str, Any]) -> Generator[Dict[str, Any], None, None]:
    """
    Context manager for tracking CLI command execution.

    Usage:
        with track_run('wider', {'file': path}) as tracker:
            tracker['rows'] = 12
        # Automatically records success/failure on exit

    The tracker dict is logged as the result summary. Exceptions propagate.
    """
    run_id = start_run(command, args)
    tracker: Dict[str, Any] = {'run_id': run_id}
    started = time.perf_counter()

    try:
        yield tracker
        complete_run(run_id, time.perf_counter() - started, tracker)
    except Exception as e:
        fail_run(run_id, time.perf_counter() - started, str(e), tracker)
        raise
