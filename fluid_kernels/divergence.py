import warp as wp
from fluid_kernels.sampling import fetch_clamped

@wp.kernel
def compute_divergence(
    velocity: wp.array2d(dtype=wp.vec2),
    divergence: wp.array2d(dtype=float),
):
    """
    Compute divergence of the velocity field at cell centers (collocated grid).

    PURPOSE:
    Central difference estimate of dvx/dx + dvy/dy from the four neighbors of each cell.
    This is the right-hand side of the pressure Poisson equation solved by
    jacobi_pressure_iteration. Neighbor lookups at the grid border are clamped.

    INPUT VARIABLES:
    - velocity[grid_x, grid_y]: vec2 - Velocity at cell center

    OUTPUT VARIABLES:
    - divergence[grid_x, grid_y]: float - Divergence at cell center
    """
    grid_x, grid_y = wp.tid()
    left = fetch_clamped(velocity, grid_x - 1, grid_y)
    right = fetch_clamped(velocity, grid_x + 1, grid_y)
    bottom = fetch_clamped(velocity, grid_x, grid_y - 1)
    top = fetch_clamped(velocity, grid_x, grid_y + 1)
    divergence[grid_x, grid_y] = 0.5 * (right[0] - left[0] + top[1] - bottom[1])
