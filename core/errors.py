"""Error types raised by lockfix."""


class LockfixError(Exception):
    """Base class for lockfix errors."""


class ConfigurationError(LockfixError):
    """Raised when configuration values are invalid."""


class ManifestError(LockfixError):
    """Raised when a pyproject manifest cannot be parsed."""


class TemporaryError(LockfixError):
    """Raised when the toolchain could not run for environmental reasons.

    Callers are expected to retry later; it is never reported as a
    lock-file error.
    """


class ExecError(LockfixError):
    """Raised when a command ran but exited unsuccessfully."""

    def __init__(
        self,
        message: str,
        cmd: str | None = None,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.cmd = cmd
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
