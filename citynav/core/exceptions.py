"""
Custom exceptions for the CityNav route decision engine
"""


class CityNavError(Exception):
    """Base exception for the route decision engine"""
    pass


class NoRoutesAvailableError(CityNavError):
    """Raised when a selection is requested over an empty candidate set"""
    pass


class UnknownTransportModeError(CityNavError, KeyError):
    """Raised when a transport mode has no configuration in the catalog"""

    def __str__(self) -> str:
        return Exception.__str__(self)


class InvalidModeConfigError(CityNavError, ValueError):
    """Raised when a mode config update names a field ModeConfig does not have"""
    pass
