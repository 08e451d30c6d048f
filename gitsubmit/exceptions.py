"""Exceptions raised by the submission client."""


class ServiceDown(IOError):
    """Raised when there is a problem connecting to the API."""


class TwoFactorAuthRequired(RuntimeError):
    """The account requires a one-time password to authenticate."""


class NotFound(ValueError):
    """Raised when a 404 status code is received for a required resource."""


class DownloadFailed(IOError):
    """Failed to save a repository snapshot to disk."""


class MalformedResponse(ValueError):
    """A response body could not be read or did not have the expected form."""


class ConfigurationError(RuntimeError):
    """A required parameter is invalid/missing from the application config."""
