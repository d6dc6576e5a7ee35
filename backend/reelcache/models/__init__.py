"""ReelCache data models."""

from .core import CachePolicy, CacheStats, Film
from .errors import AppError, AppException, ErrorCode

__all__ = [
    "AppError",
    "AppException",
    "CachePolicy",
    "CacheStats",
    "ErrorCode",
    "Film",
]
