"""Log exceptions and convert them to exit codes."""

from __future__ import annotations

import logging

from ..errors import SyncError

log = logging.getLogger("cli")


class Interceptor:
    """
    Context manager to intercept exceptions.

    Use as a context manager:

        interceptor = Interceptor()
        with interceptor:
            func()
        sys.exit(interceptor.exitcode())

    Exceptions are logged and suppressed. The failed field
    tells you whether there were any exceptions. The
    KeyboardInterrupt exception is not intercepted.
    """

    def __init__(self):
        self.failed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            return False
        if issubclass(exc_type, KeyboardInterrupt):
            return False
        state = exc_value.state if isinstance(exc_value, SyncError) else None
        if state is not None:
            log.error("operation failed in state %s: %s", state, exc_value)
        else:
            log.error("operation failed: %s", exc_value)
        log.debug("traceback of the failure", exc_info=(exc_type, exc_value, traceback))
        self.failed = True
        return True  # suppress the exception

    def exitcode(self) -> int:
        """
        Return the exitcode to pass to sys.exit.

        Zero on success, 1 on failure.
        """
        return int(self.failed)
