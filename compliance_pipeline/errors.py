"""
Pipeline Errors
Typed failures raised by the extraction pipeline.

Every error carries a ``retryable`` hint for the operator:
- retryable by resubmission (re-analyze): ServiceUnavailable, MalformedModelOutput
- requires manual correction: MissingRequiredFields, FormatViolation
- safe to retry unchanged: PersistenceFailure
Nothing in the pipeline retries on its own.
"""

from typing import List, Optional, Sequence, Tuple


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    retryable = False

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(PipelineError):
    """Missing or invalid settings (e.g. no API key). Fatal, no call is attempted."""


class EmptyInput(PipelineError):
    """Nothing to analyze."""


class OperationInProgress(PipelineError):
    """Another analyze/save request is already running for this workspace."""

    retryable = True


class ServiceUnavailable(PipelineError):
    """The model endpoint could not be reached or returned an unusable envelope."""

    retryable = True


class MalformedModelOutput(PipelineError):
    """The model text did not contain a parseable JSON object."""

    retryable = True

    def __init__(self, message: str, raw_preview: str = "", cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.raw_preview = raw_preview


class RoleMismatch(PipelineError):
    """The response declared a role other than the one requested."""

    retryable = True

    def __init__(self, expected: str, actual: Optional[str]):
        super().__init__(f"Response role mismatch: expected '{expected}', got '{actual}'")
        self.expected = expected
        self.actual = actual


class UnknownContentType(PipelineError):
    """The content type is neither 'case' nor 'regulation'."""

    retryable = True

    def __init__(self, content_type: Optional[str]):
        super().__init__(f"Unknown content type: '{content_type}' (expected 'case' or 'regulation')")
        self.content_type = content_type


class MissingRequiredFields(PipelineError):
    """One or more required fields are absent or empty."""

    retryable = True

    def __init__(self, fields: Sequence[str], content_type: Optional[str] = None):
        self.fields: List[str] = list(fields)
        self.content_type = content_type
        label = f"{content_type} " if content_type else ""
        super().__init__(f"Missing required {label}fields: {', '.join(self.fields)}")


class FormatViolation(PipelineError):
    """Enum or date format violations found by the save gate."""

    def __init__(self, violations: Sequence[Tuple[str, str]]):
        self.violations: List[Tuple[str, str]] = list(violations)
        details = "; ".join(f"{field}: {reason}" for field, reason in self.violations)
        super().__init__(f"Field format errors: {details}")

    @property
    def fields(self) -> List[str]:
        return [field for field, _ in self.violations]


class PersistenceFailure(PipelineError):
    """The record store rejected or failed the write. Nothing was committed."""

    retryable = True
