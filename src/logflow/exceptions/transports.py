"""
Transport exceptions.

Setup failures are surfaced to whoever awaits readiness; delivery failures are
recovered by the batching transports and only reported on the final attempt.
"""

from typing import Optional

from .base import ExceptionContext, LogflowError


class TransportError(LogflowError):
    """Base class for transport errors."""

    def __init__(self, transport: str, message: str, context: Optional[ExceptionContext] = None):
        self.transport = transport
        super().__init__(f"{transport}: {message}", context)


class TransportSetupError(TransportError):
    """Raised when a transport fails to become ready."""

    def __init__(self, transport: str, cause: Optional[BaseException] = None):
        self.cause = cause
        detail = str(cause) if cause else "setup failed"
        context = ExceptionContext(
            error_code="TRANSPORT_SETUP",
            context={"cause": type(cause).__name__ if cause else None},
            help_text="Setup is not retried automatically; fix the cause and call start() again",
        )
        super().__init__(transport, detail, context)


class DeliveryError(TransportError):
    """Raised when a batch could not be delivered to a remote sink."""

    def __init__(self, transport: str, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        context = ExceptionContext(error_code="TRANSPORT_DELIVERY")
        super().__init__(transport, message, context)
        if status_code is not None:
            self.add_context(status_code=status_code)
