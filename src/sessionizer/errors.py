"""Base exception for sessionizer.

Every module defines its own exception classes deriving from SessionizerError,
so the CLI can catch the whole family in one place and map it to an exit code.
"""


class SessionizerError(Exception):
    """Base exception for sessionizer errors."""

    exit_code = 1


__all__ = ["SessionizerError"]
