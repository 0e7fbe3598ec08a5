"""Error taxonomy for the optimization pipeline.

Every failure the pipeline raises carries an ``ErrorKind`` so callers (a batch
job, a request handler) can tell a bad input apart from a broken environment
without parsing messages.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    UNSUPPORTED_TYPE = "UnsupportedType"
    CODEC_UNAVAILABLE = "CodecUnavailable"
    CODEC_FAILURE = "CodecFailure"
    IO_FAILURE = "IOFailure"

    @property
    def is_fatal(self) -> bool:
        """True when the environment is broken and a batch should stop."""
        return self in (ErrorKind.CODEC_UNAVAILABLE, ErrorKind.IO_FAILURE)


class ImageOptimizerError(Exception):
    """Base exception for all pipeline failures.

    Attributes:
        message: Human-readable error message
        kind: Machine-readable failure category
    """

    def __init__(self, message: str, kind: ErrorKind):
        self.message = message
        self.kind = kind
        super().__init__(message)


class NotFoundError(ImageOptimizerError):
    """Source file missing

    Examples:
        - Optimizing a path that was deleted
        - Reverting a file that no longer exists
    """

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.NOT_FOUND)


class BackupNotFoundError(NotFoundError):
    """No backup exists for the ``(path, identifier)`` pair: nothing to revert."""


class UnsupportedTypeError(ImageOptimizerError):
    """No registered processor handles the file's extension."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.UNSUPPORTED_TYPE)


class CodecUnavailableError(ImageOptimizerError):
    """The Pillow build lacks the encoder/decoder for the format."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.CODEC_UNAVAILABLE)


class CodecFailureError(ImageOptimizerError):
    """Decode or encode failed on a supported type (corrupt or truncated file)."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.CODEC_FAILURE)


class IOFailureError(ImageOptimizerError):
    """Permission or disk errors while reading/writing images or backups."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.IO_FAILURE)
