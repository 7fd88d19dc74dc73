"""
Exceptions raised by RootByte.
"""


class RootByteError(Exception):
    """Base class for errors that abort a command with a non-zero exit."""


class ContentError(RootByteError):
    """A required content path is missing or unreadable."""


class ConfigError(RootByteError):
    """The configuration holds a value the pipeline cannot use."""
