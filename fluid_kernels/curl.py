import warp as wp
from fluid_kernels.sampling import fetch_clamped

@wp.kernel
def compute_curl(
    velocity: wp.array2d(dtype=wp.vec2),
    curl: wp.array2d(dtype=float),
):
    """
    Scalar curl (vorticity) of the velocity field.

    PURPOSE:
    Central difference estimate of dvy/dx - dvx/dy from the four neighbors of each cell.
    Neighbor lookups at the grid border are clamped.

    INPUT VARIABLES:
    - velocity[grid_x, grid_y]: vec2 - Velocity at cell center

    OUTPUT VARIABLES:
    - curl[grid_x, grid_y]: float - Curl at cell center
    """
    grid_x, grid_y = wp.tid()
    left = fetch_clamped(velocity, grid_x - 1, grid_y)
    right = fetch_clamped(velocity, grid_x + 1, grid_y)
    bottom = fetch_clamped(velocity, grid_x, grid_y - 1)
    top = fetch_clamped(velocity, grid_x, grid_y + 1)
    curl[grid_x, grid_y] = 0.5 * ((right[1] - left[1]) - (top[0] - bottom[0]))
