import warp as wp
from fluid_kernels.sampling import fetch_clamped

@wp.kernel
def subtract_pressure_gradient(
    velocity_in: wp.array2d(dtype=wp.vec2),
    pressure: wp.array2d(dtype=float),
    velocity_out: wp.array2d(dtype=wp.vec2),
):
    """
    Project velocity using the pressure gradient to enforce incompressibility.

    PURPOSE:
    Subtracts the central difference gradient of the solved pressure from the velocity,
    v_new = v_old - grad(p), leaving an approximately divergence-free field for advection.

    INPUT VARIABLES:
    - velocity_in[grid_x, grid_y]: vec2 - Velocity at cell center
    - pressure[grid_x, grid_y]: float - Pressure after the Jacobi iterations

    OUTPUT VARIABLES:
    - velocity_out[grid_x, grid_y]: vec2 - Projected velocity
    """
    grid_x, grid_y = wp.tid()
    p_left = fetch_clamped(pressure, grid_x - 1, grid_y)
    p_right = fetch_clamped(pressure, grid_x + 1, grid_y)
    p_bottom = fetch_clamped(pressure, grid_x, grid_y - 1)
    p_top = fetch_clamped(pressure, grid_x, grid_y + 1)

    gradient = 0.5 * wp.vec2(p_right - p_left, p_top - p_bottom)
    velocity_out[grid_x, grid_y] = velocity_in[grid_x, grid_y] - gradient
