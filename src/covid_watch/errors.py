"""Exception taxonomy for the daily report pipeline."""
from __future__ import annotations


class CovidWatchError(Exception):
    """Base class for all pipeline errors."""


class ParseError(CovidWatchError):
    """A daily report file is not usable tabular data.

    Raised for unreadable headers, encoding failures and a missing
    country/region column. Blank country cells and empty or non-numeric
    counters are never a ParseError.
    """


class LoadError(CovidWatchError):
    """A daily report file could not be opened or fully parsed."""


class ConfigError(CovidWatchError):
    """The watchlist or pipeline settings are missing or malformed."""


class DayKeyError(CovidWatchError, ValueError):
    """A file base name does not encode a `MM-DD-YYYY` report date."""
