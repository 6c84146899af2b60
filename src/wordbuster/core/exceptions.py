"""Custom exceptions for wordbuster.

Configuration errors abort a run before any candidate is probed. Probe
errors are recovered per candidate and never escape the engine.
"""

from __future__ import annotations


class WordbusterError(Exception):
    """Base exception for all wordbuster errors.

    All custom exceptions inherit from this class, allowing callers to
    catch all wordbuster-specific errors with a single except clause.
    """
    pass


class ConfigurationError(WordbusterError):
    """Raised when a run cannot start because its configuration is invalid.

    This includes:
    - Missing or unreadable word lists
    - Invalid target or resolver addresses
    - Fuzz templates without the placeholder token
    """
    pass


class WordlistError(ConfigurationError):
    """Raised when the word list is missing or cannot be read."""
    pass


class InvalidTargetError(ConfigurationError):
    """Raised when a target, server or resolver address cannot be parsed."""
    pass


class MissingPlaceholderError(ConfigurationError):
    """Raised when fuzz mode finds no FUZZ token in URL, headers, cookies or body."""
    pass


class TargetUnreachableError(ConfigurationError):
    """Raised when a mandatory pre-run baseline request fails."""
    pass


class ProbeError(WordbusterError):
    """Raised during a single probe.

    Probe executors convert these into Failure outcomes; they are counted
    in the errored bucket and never abort the run.
    """
    pass


class NetworkTimeoutError(ProbeError):
    """Raised when a network request times out."""
    pass


class ConnectionError(ProbeError):
    """Raised when a network connection fails."""
    pass


class OutputError(WordbusterError):
    """Raised when the output file cannot be opened."""
    pass
