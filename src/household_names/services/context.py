"""Per-invocation execution context threaded through naming calls."""

import contextlib
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass
class ExecutionContext:
    """State owned by one job or request.

    suppress_retrigger is set while the name updater writes its own results
    so the writes do not re-enter the household triggers.
    """

    suppress_retrigger: bool = False

    @contextlib.contextmanager
    def suppressing_retrigger(self) -> Iterator["ExecutionContext"]:
        previous = self.suppress_retrigger
        self.suppress_retrigger = True
        try:
            yield self
        finally:
            self.suppress_retrigger = previous
