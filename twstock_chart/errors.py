from __future__ import annotations


class ChartError(Exception):
    """Base class for failures of a single render call."""


class EmptySeriesError(ChartError):
    pass


class InvalidDataError(ChartError, ValueError):
    pass


class EncodingError(ChartError):
    pass
