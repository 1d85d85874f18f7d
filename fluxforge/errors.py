"""
fluxforge.errors
~~~~~~~~~~~~~~~~
Exception hierarchy for the job layer.

ValidationError   – caller-fixable input, raised before any backend call
ProbeError        – metadata probe failed; callers fall back to defaults
PersistError      – config could not be written; in-memory value stays applied
ConversionError   – backend invocation failed or reported failure
JobInFlightError  – a job is already running for this session
"""

from __future__ import annotations

from enum import Enum


class ValidationCode(str, Enum):
    NO_INPUT             = "no_input"
    EMPTY_PAGE_SELECTION = "empty_page_selection"
    INVALID_OPTION       = "invalid_option"


class FluxForgeError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(FluxForgeError):
    code: ValidationCode = ValidationCode.INVALID_OPTION


class NoInputError(ValidationError):
    code = ValidationCode.NO_INPUT

    def __init__(self, message: str = "No input files have been added."):
        super().__init__(message)


class EmptyPageSelectionError(ValidationError):
    code = ValidationCode.EMPTY_PAGE_SELECTION

    def __init__(self, text: str = ""):
        self.text = text
        super().__init__(f"The page selection '{text}' does not contain any pages.")


class InvalidOptionError(ValidationError):
    code = ValidationCode.INVALID_OPTION


class PageRangeError(ValidationError):
    """Raised by strict page-range parsing for a token it cannot read."""
    code = ValidationCode.EMPTY_PAGE_SELECTION

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Cannot read page token '{token}'.")


class ProbeError(FluxForgeError):
    pass


class PersistError(FluxForgeError):
    pass


class ConversionError(FluxForgeError):
    pass


class JobInFlightError(FluxForgeError):
    def __init__(self, message: str = "A conversion is already running."):
        super().__init__(message)
