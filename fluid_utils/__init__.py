"""
Utils package for field storage, splat queueing, colors and configuration.
"""
from .errors import FluidSimError, AllocationError, ConfigurationError
from .structs import GridModel
from .fields import GridField, DoubleBuffer, allocate, allocate_double, release
from .splat_queue import SplatRequest, SplatQueue
from .colors import PointerColor, random_color
from .config import FluidConfig

__all__ = [
    'FluidSimError', 'AllocationError', 'ConfigurationError',
    'GridModel',
    'GridField', 'DoubleBuffer', 'allocate', 'allocate_double', 'release',
    'SplatRequest', 'SplatQueue',
    'PointerColor', 'random_color',
    'FluidConfig',
]
