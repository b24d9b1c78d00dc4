class AcrError(Exception):
    """Base class for errors raised by the commit review engine."""


class InvalidArgumentError(AcrError, ValueError):
    """Programmer error, e.g. a non-positive chunk size. Never retried."""


class CacheIOError(AcrError):
    """Reading, writing or clearing the context cache failed."""


class GatewayError(AcrError):
    """The completion service call failed (network, status or payload)."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(GatewayError):
    """The completion service rejected the credentials (HTTP 401)."""


class ConfigurationError(AcrError):
    pass


class GitCommandError(AcrError):
    def __init__(self, command, returncode: int, stderr: str):
        super().__init__(
            f"git command failed ({returncode}): {' '.join(command)}\n{stderr}"
        )
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
