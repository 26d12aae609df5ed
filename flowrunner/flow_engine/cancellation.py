"""
Run-scoped cancellation.

The executor checks the token before dispatching every node. A token can be
cancelled explicitly or carry a deadline.
"""

import time
from typing import Optional

from flowrunner.flow_engine.exceptions import CancelledError


class CancellationToken:
    """
    Usage:
        token = CancellationToken(timeout=30)
        executor = FlowExecutor(definition, cancellation_token=token)
        ...
        token.cancel("user requested")
    """

    def __init__(self, timeout: Optional[float] = None):
        self._reason: Optional[str] = None
        self._deadline = time.monotonic() + timeout if timeout else None

    def cancel(self, reason: str = "Flow run cancelled"):
        if self._reason is None:
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        if self._reason is not None:
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def reason(self) -> Optional[str]:
        if self._reason is not None:
            return self._reason
        if self.cancelled:
            return "Flow run deadline exceeded"
        return None

    def raise_if_cancelled(self, node_id: Optional[str] = None):
        if self.cancelled:
            raise CancelledError(self.reason, node_id=node_id)
