"""
Exception hierarchy for the ATS scorer.

Every oracle-related error keeps the raw oracle text so a failed analysis can
be diagnosed from the error alone.
"""

from typing import Optional


class AtsMatchingError(Exception):
    """Base class for all errors raised by the scorer."""


class OracleError(AtsMatchingError):
    """Something went wrong talking to, or reading from, the text oracle."""

    user_message = "The AI service failed to respond."

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class OracleCallError(OracleError):
    """The oracle request failed or came back with no usable text."""


class OracleTimeoutError(OracleError):
    """The oracle did not answer within the caller-side timeout."""

    user_message = "The AI service took too long to respond."


class OracleResponseError(OracleError):
    """The oracle answered, but the answer could not be used."""

    user_message = "The AI returned an unusable response."


class ExtractionError(OracleResponseError):
    """No `{ ... }` span could be located in the oracle response."""


class JsonParseError(OracleResponseError):
    """The extracted span is not a valid JSON object."""


class SchemaValidationError(OracleResponseError):
    """A parsed field has a type the schema cannot accept."""


class PersistenceError(AtsMatchingError):
    """Saving or loading a scan failed."""


class DocumentExtractionError(AtsMatchingError):
    """Plain text could not be extracted from an uploaded document."""


class InvalidTransitionError(AtsMatchingError):
    """The orchestrator was asked to make an illegal state transition."""


class AnalysisFailedError(AtsMatchingError):
    """
    The single user-facing failure of an analysis run.

    Attributes:
        stage: name of the state the run was in when it failed
        cause: the underlying exception
        raw_text: offending oracle text, when the failure came from the oracle
    """

    def __init__(self, message: str, stage: str, cause: Optional[BaseException] = None,
                 raw_text: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause
        self.raw_text = raw_text
