"""
Error taxonomy for TalentPool core operations.
"""


class TalentPoolError(Exception):
    """Base class for domain errors."""


class PreconditionError(TalentPoolError):
    """Raised when an action is attempted from the wrong status. No state is changed."""


class ConfigurationError(TalentPoolError):
    """Raised when an external credential or setting is missing."""


class ExternalServiceError(TalentPoolError):
    """Raised when the AI gateway or voice vendor fails or returns malformed output."""


class EmptyInputError(TalentPoolError):
    """Raised when an interview ends without any recorded utterance."""


class ProfileNotFoundError(TalentPoolError):
    """Raised when a profile document does not exist."""

    def __init__(self, uid: str):
        super().__init__(f"Profile not found: {uid}")
        self.uid = uid


class PermissionDeniedError(TalentPoolError):
    """Raised when the caller may not act on the target profile."""
