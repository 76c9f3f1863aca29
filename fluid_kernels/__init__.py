"""
Warp kernels for the stable fluids pipeline, one pass per module.
"""
from .splat import splat_velocity, splat_dye
from .curl import compute_curl
from .vorticity import apply_vorticity
from .divergence import compute_divergence
from .jacobi_pressure_iteration import scale_pressure, jacobi_pressure_iteration
from .gradient_subtract import subtract_pressure_gradient
from .advect import advect_velocity, advect_dye

__all__ = [
    'splat_velocity',
    'splat_dye',
    'compute_curl',
    'apply_vorticity',
    'compute_divergence',
    'scale_pressure',
    'jacobi_pressure_iteration',
    'subtract_pressure_gradient',
    'advect_velocity',
    'advect_dye',
]
