"""Object storage for cover images and narration audio."""

from .base import StorageException, StorageProvider
from .retry import RetryExhausted, RetryPolicy, linear_backoff

__all__ = [
    "RetryExhausted",
    "RetryPolicy",
    "StorageException",
    "StorageProvider",
    "linear_backoff",
]
