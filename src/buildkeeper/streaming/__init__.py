"""Helpers for log streaming sessions."""

from .keepalive import KeepAliveTicker, StreamingLogToken, StreamingSession

__all__ = ["KeepAliveTicker", "StreamingLogToken", "StreamingSession"]
