"""
This module defines custom exceptions for the waste reminder.
"""


class DownloadError(Exception):
    """Custom exception for errors while fetching a remote calendar feed."""

    pass


class ParsingError(Exception):
    """Custom exception for errors during iCal parsing."""

    pass


class ConfigError(Exception):
    """Raised when the reminder configuration is invalid."""

    pass
