"""Signal handling while an interactive child process owns the terminal."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager


def _in_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


def _swallow_interrupt(signum: int, frame: object) -> None:
    pass


@contextmanager
def interactive_child() -> Iterator[None]:
    """Swallow SIGINT in this process while a foreground child runs.

    The terminal delivers Ctrl+C to the whole foreground process group, so
    the child (ssh, aws, xpanes) still receives it and decides what to do;
    this process just keeps waiting for the child to exit. A no-op
    handler is installed instead of ``SIG_IGN``: an ignored signal stays
    ignored across exec, a Python handler resets to the default. The previous
    handler is restored on exit. Signal handlers can only be changed from the
    main thread, elsewhere this is a no-op.
    """
    if not _in_main_thread():
        yield
        return

    previous = signal.signal(signal.SIGINT, _swallow_interrupt)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def install_exit_handlers() -> None:
    """Turn SIGTERM into a normal interpreter exit.

    Raising SystemExit from the handler lets ``finally`` blocks (temporary
    preview files, restored signal handlers) run before the process ends.
    """

    def sigterm_handler(signum: int, frame: object) -> None:
        raise SystemExit(128 + signum)

    if _in_main_thread():
        signal.signal(signal.SIGTERM, sigterm_handler)
