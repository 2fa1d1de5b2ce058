"""
Standard exit codes for tagversion commands.

Following Unix/POSIX conventions for command-line tools.
"""

from .errors import ErrorKind, TagVersionError

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
REFERENCE_NOT_FOUND = 64   # Ref/revision does not resolve, or HEAD untagged
REPOSITORY_NOT_FOUND = 65  # Remote repository does not exist
CONFIG_ERROR = 66          # Configuration error
PATH_NOT_FOUND = 67        # File or folder missing at revision
EXECUTION_FAILED = 70      # Ambiguous tag state or failed git invocation
INTERRUPTED = 130          # Terminated by Ctrl+C (SIGINT)

KIND_EXIT_CODES = {
    ErrorKind.INVALID_CONFIG: CONFIG_ERROR,
    ErrorKind.REFERENCE_NOT_FOUND: REFERENCE_NOT_FOUND,
    ErrorKind.REPOSITORY_NOT_FOUND: REPOSITORY_NOT_FOUND,
    ErrorKind.FILE_NOT_FOUND: PATH_NOT_FOUND,
    ErrorKind.FOLDER_NOT_FOUND: PATH_NOT_FOUND,
    ErrorKind.EXECUTION_FAILED: EXECUTION_FAILED,
}

# Exit code mappings for common non-tagversion exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': GENERAL_ERROR,
    'ValueError': USAGE_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, TagVersionError):
        return KIND_EXIT_CODES[exc.kind]
    return EXCEPTION_EXIT_CODES.get(exc.__class__.__name__, GENERAL_ERROR)

