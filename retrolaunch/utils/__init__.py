"""Small shared helpers."""

from .result import Err, Ok, Result, capture, error_message, is_err, unwrap

__all__ = [
    "Err",
    "Ok",
    "Result",
    "capture",
    "error_message",
    "is_err",
    "unwrap",
]
