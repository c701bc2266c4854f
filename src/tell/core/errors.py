"""Exceptions raised by tell."""


class TellError(Exception):
    """Base class for all tell errors."""


class ConfigDirectoryError(TellError, OSError):
    """The per-user config directory could not be determined."""


class ConfigParseError(TellError, ValueError):
    """The config file exists but its content is not a valid config."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file {path}: {reason}")


class RequestError(TellError, ConnectionError):
    """The inference server could not be reached or refused the request."""


class UsageError(TellError):
    """The command line does not match any supported invocation."""
