import warp as wp
from fluid_utils.structs import GridModel
from fluid_kernels.sampling import cell_uv, sample_bilinear

@wp.kernel
def advect_velocity(
    velocity_in: wp.array2d(dtype=wp.vec2),
    model: GridModel,
    dt: float,
    dissipation: float,
    velocity_out: wp.array2d(dtype=wp.vec2),
):
    """
    Semi-Lagrangian self-advection of the velocity field.

    PURPOSE:
    Each cell traces backward along its own velocity for one time step and takes the
    bilinearly interpolated velocity found there, divided by (1 + dissipation * dt).
    The velocity is read directly at the cell (no resampling), so this pass only works
    on a field advected at its own resolution.

    INPUT VARIABLES:
    - velocity_in[grid_x, grid_y]: vec2 - Velocity in simulation texels per second
    - model: GridModel - Simulation grid dimensions and texel size
    - dt: float - Time step size (already clamped by the caller)
    - dissipation: float - Decay rate, 0 = no decay

    OUTPUT VARIABLES:
    - velocity_out[grid_x, grid_y]: vec2 - Advected velocity
    """
    grid_x, grid_y = wp.tid()
    uv = cell_uv(grid_x, grid_y, model)
    velocity = velocity_in[grid_x, grid_y]
    source = uv - dt * wp.cw_mul(velocity, model.texel_size)
    decay = 1.0 + dissipation * dt
    velocity_out[grid_x, grid_y] = sample_bilinear(velocity_in, source) / decay

@wp.kernel
def advect_dye(
    velocity: wp.array2d(dtype=wp.vec2),
    velocity_model: GridModel,
    dye_in: wp.array2d(dtype=wp.vec4),
    dye_model: GridModel,
    dt: float,
    dissipation: float,
    dye_out: wp.array2d(dtype=wp.vec4),
):
    """
    Semi-Lagrangian advection of the dye field through the velocity field.

    PURPOSE:
    The dye grid may have a different resolution than the velocity grid. The velocity
    is therefore resampled at the dye cell's UV, and the backtrace offset is scaled by
    the velocity grid's texel size (velocity is stored in simulation texels per second).

    INPUT VARIABLES:
    - velocity[grid_x, grid_y]: vec2 - Velocity on the simulation grid
    - velocity_model: GridModel - Simulation grid dimensions and texel size
    - dye_in[grid_x, grid_y]: vec4 - Dye on the dye grid
    - dye_model: GridModel - Dye grid dimensions and texel size
    - dt: float - Time step size
    - dissipation: float - Decay rate, 0 = no decay

    OUTPUT VARIABLES:
    - dye_out[grid_x, grid_y]: vec4 - Advected dye
    """
    grid_x, grid_y = wp.tid()
    uv = cell_uv(grid_x, grid_y, dye_model)
    u = sample_bilinear(velocity, uv)
    source = uv - dt * wp.cw_mul(u, velocity_model.texel_size)
    decay = 1.0 + dissipation * dt
    dye_out[grid_x, grid_y] = sample_bilinear(dye_in, source) / decay
