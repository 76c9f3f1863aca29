from typing import Any

import warp as wp
from fluid_utils.structs import GridModel

@wp.func
def cell_uv(grid_x: int, grid_y: int, model: GridModel):
    """UV coordinate of the center of cell (grid_x, grid_y)."""
    return wp.vec2(
        (float(grid_x) + 0.5) * model.texel_size[0],
        (float(grid_y) + 0.5) * model.texel_size[1],
    )

@wp.func
def fetch_clamped(field: wp.array2d(dtype=Any), grid_x: int, grid_y: int):
    """Read a cell, clamping the index to the grid border."""
    x = wp.clamp(grid_x, 0, field.shape[0] - 1)
    y = wp.clamp(grid_y, 0, field.shape[1] - 1)
    return field[x, y]

@wp.func
def sample_bilinear(field: wp.array2d(dtype=Any), uv: wp.vec2):
    """
    Bilinearly interpolate a field at a UV coordinate.

    Samples live at cell centers. Coordinates outside [0,1]^2 clamp to the
    border cells (no wraparound).
    """
    x = uv[0] * float(field.shape[0]) - 0.5
    y = uv[1] * float(field.shape[1]) - 0.5
    fx = wp.floor(x)
    fy = wp.floor(y)
    tx = x - fx
    ty = y - fy
    i = int(fx)
    j = int(fy)

    s00 = fetch_clamped(field, i, j)
    s10 = fetch_clamped(field, i + 1, j)
    s01 = fetch_clamped(field, i, j + 1)
    s11 = fetch_clamped(field, i + 1, j + 1)
    return wp.lerp(wp.lerp(s00, s10, tx), wp.lerp(s01, s11, tx), ty)
