"""
Error taxonomy.

TransportFailure is always recovered locally (synthetic data, demo identity).
ValidationFailure and AuthorizationFailure become user-visible messages.
ConfigurationFailure is the one case returned as an error, since it means a
caller asked for a section or action that does not exist.
"""


class SastError(Exception):
    """Base class for all dashboard errors."""


class TransportFailure(SastError):
    """Endpoint unreachable, non-2xx status, or a body that does not parse."""


class ValidationFailure(SastError):
    """Missing or malformed input fields."""


class AuthorizationFailure(SastError):
    """Invalid credentials, unknown or expired token, duplicate account."""


class ConfigurationFailure(SastError):
    """Unknown identifier at an endpoint boundary."""


class UnknownSectionError(ConfigurationFailure):
    def __init__(self, value):
        super().__init__("Unknown section")
        self.value = value


class UnknownActionError(ConfigurationFailure):
    def __init__(self, value):
        super().__init__("Unknown action")
        self.value = value


class DuplicateAccountError(AuthorizationFailure):
    """Signup with a username or email that is already registered."""
