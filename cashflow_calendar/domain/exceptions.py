"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ForecastConfigurationError(DomainException):
    """Forecast parameters are invalid (non-positive safety buffer, empty horizon)"""

    pass


class ForecastGenerationError(DomainException):
    """Forecast cannot be computed from the supplied accounts"""

    pass
