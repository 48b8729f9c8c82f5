"""
Exception hierarchy for codepack.
"""


class CodepackError(Exception):
    """Base exception for codepack errors."""
    pass


class ConfigError(CodepackError):
    """Raised when the startup configuration is invalid."""
    pass


class InvalidRootError(ConfigError):
    """Raised when the provided root directory is invalid."""
    pass


class LanguageMapError(ConfigError):
    """Raised when a language table cannot be read or is malformed."""
    pass


class OutputError(CodepackError):
    """Raised when there are issues writing to an output destination."""
    pass


class ShortWriteError(OutputError):
    """Raised when an output destination accepts fewer bytes than requested."""
    pass


class StreamError(CodepackError):
    """Raised when a source file fails to read after its entry was started."""
    pass


class LargeFilePolicyError(CodepackError):
    """Raised when the large-file policy fails for a reason other than a decline."""
    pass


# Not a CodepackError subclass.
class OperationCanceled(Exception):
    """Raised when the user interrupts the run."""

    def __init__(self, message: str = "operation canceled") -> None:
        super().__init__(message)
