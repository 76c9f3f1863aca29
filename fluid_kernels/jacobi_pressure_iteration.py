import warp as wp
from fluid_kernels.sampling import fetch_clamped

@wp.kernel
def scale_pressure(
    pressure_in: wp.array2d(dtype=float),
    factor: float,
    pressure_out: wp.array2d(dtype=float),
):
    """Multiply the previous tick's pressure by a damping factor in [0, 1] (warm start of the solve)."""
    grid_x, grid_y = wp.tid()
    pressure_out[grid_x, grid_y] = pressure_in[grid_x, grid_y] * factor

@wp.kernel
def jacobi_pressure_iteration(
    pressure_in: wp.array2d(dtype=float),
    divergence: wp.array2d(dtype=float),
    pressure_out: wp.array2d(dtype=float),
):
    """
    One Jacobi iteration for solving the Poisson equation.

    PURPOSE:
    This function performs one iteration of the Jacobi method to solve the Poisson equation
    lap(p) = div(v) for pressure, using unit cell spacing. Every cell reads only the previous
    iterate, so pressure_in and pressure_out must be different buffers (the caller swaps them
    after each launch).

    INPUT VARIABLES:
    - pressure_in[grid_x, grid_y]: float - Pressure from the previous iteration
    - divergence[grid_x, grid_y]: float - Divergence RHS at cell center

    OUTPUT VARIABLES:
    - pressure_out[grid_x, grid_y]: float - Updated pressure
        p_new = (p_left + p_right + p_bottom + p_top - divergence) / 4
        Neighbors outside the grid are clamped to the border cell (zero normal pressure gradient).
    """
    grid_x, grid_y = wp.tid()
    p_left = fetch_clamped(pressure_in, grid_x - 1, grid_y)
    p_right = fetch_clamped(pressure_in, grid_x + 1, grid_y)
    p_bottom = fetch_clamped(pressure_in, grid_x, grid_y - 1)
    p_top = fetch_clamped(pressure_in, grid_x, grid_y + 1)

    p_neighbors = p_left + p_right + p_bottom + p_top
    pressure_out[grid_x, grid_y] = (p_neighbors - divergence[grid_x, grid_y]) * 0.25
