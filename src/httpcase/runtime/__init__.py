"""Runtime - call context, retry loop and observability."""

from .context import CallContext, CancelToken, background

__all__ = ["CallContext", "CancelToken", "background"]
