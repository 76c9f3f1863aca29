import warp as wp
from fluid_utils.structs import GridModel
from fluid_kernels.sampling import cell_uv

@wp.func
def splat_weight(uv: wp.vec2, point: wp.vec2, radius: float, aspect_ratio: float):
    """Gaussian falloff exp(-d^2 / r^2), with the x distance stretched by the viewport aspect ratio."""
    p = uv - point
    p = wp.vec2(p[0] * aspect_ratio, p[1])
    return wp.exp(-wp.dot(p, p) / (radius * radius))

@wp.kernel
def splat_velocity(
    velocity_in: wp.array2d(dtype=wp.vec2),
    model: GridModel,
    point: wp.vec2,
    force: wp.vec2,
    radius: float,
    aspect_ratio: float,
    velocity_out: wp.array2d(dtype=wp.vec2),
):
    """
    Add a radial force splat to the velocity field.

    INPUT VARIABLES:
    - velocity_in[grid_x, grid_y]: vec2 - Current velocity
    - model: GridModel - Velocity grid dimensions and texel size
    - point: vec2 - Splat center in UV space
    - force: vec2 - Force added at the center, falling off with splat_weight
    - radius: float - Aspect-corrected splat radius in UV units
    - aspect_ratio: float - Viewport width / height

    OUTPUT VARIABLES:
    - velocity_out[grid_x, grid_y]: vec2 - velocity_in + force * weight
    """
    grid_x, grid_y = wp.tid()
    uv = cell_uv(grid_x, grid_y, model)
    weight = splat_weight(uv, point, radius, aspect_ratio)
    velocity_out[grid_x, grid_y] = velocity_in[grid_x, grid_y] + force * weight

@wp.kernel
def splat_dye(
    dye_in: wp.array2d(dtype=wp.vec4),
    model: GridModel,
    point: wp.vec2,
    color: wp.vec3,
    radius: float,
    aspect_ratio: float,
    dye_out: wp.array2d(dtype=wp.vec4),
):
    """Add a radial color deposit to the RGB channels of the dye field. Alpha is left untouched."""
    grid_x, grid_y = wp.tid()
    uv = cell_uv(grid_x, grid_y, model)
    weight = splat_weight(uv, point, radius, aspect_ratio)
    dye = dye_in[grid_x, grid_y]
    dye_out[grid_x, grid_y] = wp.vec4(
        dye[0] + color[0] * weight,
        dye[1] + color[1] * weight,
        dye[2] + color[2] * weight,
        dye[3],
    )
