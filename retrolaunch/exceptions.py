#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
retrolaunch - Consolidated Exception Classes

Every component of the identification and launch-resolution pipeline raises
one of these. Nothing is swallowed on the way up: a caller either gets a
success value or one of the errors below, possibly re-raised with added
context (for example the database file that was being scanned).
"""

from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# IO errors
# =====================================================================================================

class IoError(BaseError):
    """Raised when a file cannot be opened or read."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 os_error: Optional[OSError] = None,
                 details: Optional[Dict[str, Any]] = None):
        io_details = details or {}
        if file_path:
            io_details['file_path'] = str(file_path)
        if os_error is not None:
            io_details['errno'] = os_error.errno
            io_details['strerror'] = os_error.strerror
        super().__init__(message, "IO_ERROR", io_details)
        self.file_path = str(file_path) if file_path else None
        self.os_error = os_error


# =====================================================================================================
# Parsing errors
# =====================================================================================================

class ParseError(BaseError):
    """Raised on a malformed token stream, unexpected end of stream or bad timestamp."""

    def __init__(self, message: str, source: Optional[str] = None,
                 error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        parse_details = details or {}
        if source:
            parse_details['source'] = str(source)
        super().__init__(message, error_code or "PARSE_ERROR", parse_details)
        self.source = str(source) if source else None


class TokenNotFoundError(ParseError):
    """Raised when a token scan reaches end of stream without finding its literal."""

    def __init__(self, token: str, source: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        token_details = details or {}
        token_details['token'] = token
        super().__init__(f"Token {token!r} not found", source, "TOKEN_NOT_FOUND", token_details)
        self.token = token


# =====================================================================================================
# Validation and lookup errors
# =====================================================================================================

class ValidationError(BaseError):
    """Raised when binary content does not match what is expected (signature length or value)."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        validation_details = details or {}
        if file_path:
            validation_details['file_path'] = str(file_path)
        super().__init__(message, "VALIDATION_ERROR", validation_details)


class NotFoundError(BaseError):
    """Raised when no database, id-list or launch rule matches."""

    def __init__(self, message: str, what: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        lookup_details = details or {}
        if what:
            lookup_details['what'] = what
        super().__init__(message, "NOT_FOUND", lookup_details)
        self.what = what


# =====================================================================================================
# Configuration errors
# =====================================================================================================

class ConfigurationError(BaseError):
    """Raised when launcher settings cannot be loaded or fail validation."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, "CONFIG_ERROR", config_details)
