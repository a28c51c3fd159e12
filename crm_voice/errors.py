"""Exception types raised by crm_voice."""

from typing import Optional


class CrmVoiceError(Exception):
    """Base class for crm_voice errors."""


class ConfigError(CrmVoiceError):
    """Configuration file could not be read or is malformed."""


class BackendError(CrmVoiceError):
    """The CRM backend could not be reached or returned a bad response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
