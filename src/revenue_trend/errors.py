class ForecastError(ValueError):
    """Base class for every error raised while building a revenue forecast."""


class ParseError(ForecastError):
    """An order date could not be interpreted as a calendar date."""


class InsufficientDataError(ForecastError):
    """Too few distinct months to fit a trend line."""


class InvalidArgumentError(ForecastError):
    """A caller-supplied argument is outside its valid range."""
