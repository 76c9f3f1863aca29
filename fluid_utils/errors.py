"""
Exception types raised by the fluid solver.
"""


class FluidSimError(RuntimeError):
    """Base class for all solver errors."""


class AllocationError(FluidSimError):
    """Raised when a grid field cannot be allocated with the requested shape or channel layout."""


class ConfigurationError(FluidSimError, ValueError):
    """Raised when a configuration option is unknown or out of range."""
