"""
Exception hierarchy for the credit analysis pipeline.

Every failure raised by the request agent derives from CreditCompilerError so
the orchestrator can stop a batch and surface one message without catching
programming errors.
"""

from __future__ import annotations


class CreditCompilerError(Exception):
    """Base class for all analysis / extraction failures."""


class ConfigurationError(CreditCompilerError, EnvironmentError):
    """No model credential configured; raised before any network call."""


class EmptyResponseError(CreditCompilerError):
    """The provider answered without a response body."""


class MalformedResponseError(CreditCompilerError):
    """The body was not valid JSON or did not match the response schema."""


class TransportError(CreditCompilerError):
    """Network or provider-level failure."""


class ExtractionError(CreditCompilerError):
    """Score-report image analysis failed."""
