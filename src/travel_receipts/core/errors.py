from __future__ import annotations


class ConfigError(ValueError):
    """Provider configuration could not be resolved at startup."""


class ExtractionError(Exception):
    """Base class for failures of a single extraction attempt."""

    status_code = 500


class InputError(ExtractionError):
    """Unsupported media type, unreadable document or missing text."""

    status_code = 400


class UpstreamError(ExtractionError):
    """The language model provider or the OCR engine failed."""

    status_code = 502


class DecodeError(ExtractionError):
    """No parseable JSON object in the provider output."""

    status_code = 422


class SchemaError(ExtractionError):
    """Unknown record tag, or a required key still missing after completion."""

    status_code = 422
