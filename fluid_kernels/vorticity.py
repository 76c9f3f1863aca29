import warp as wp
from fluid_kernels.sampling import fetch_clamped

# Gradients of |curl| shorter than this are treated as zero (no direction to confine along)
GRADIENT_EPSILON = wp.constant(1.0e-5)
# Per-component velocity bound in simulation texels per second
VELOCITY_LIMIT = wp.constant(1000.0)

@wp.kernel
def apply_vorticity(
    velocity_in: wp.array2d(dtype=wp.vec2),
    curl: wp.array2d(dtype=float),
    curl_strength: float,
    dt: float,
    velocity_out: wp.array2d(dtype=wp.vec2),
):
    """
    Vorticity confinement force.

    PURPOSE:
    Reintroduces small-scale rotation damped out by advection. The gradient of |curl| is
    normalized to a unit vector N, rotated by 90 degrees, and scaled by curl_strength * curl * dt
    before being added to the velocity. A zero-length gradient contributes nothing.

    INPUT VARIABLES:
    - velocity_in[grid_x, grid_y]: vec2 - Velocity at cell center
    - curl[grid_x, grid_y]: float - Curl computed by compute_curl
    - curl_strength: float - Confinement strength
    - dt: float - Time step size

    OUTPUT VARIABLES:
    - velocity_out[grid_x, grid_y]: vec2 - Velocity with the confinement force applied,
        clamped to +-VELOCITY_LIMIT per component
    """
    grid_x, grid_y = wp.tid()
    c_left = fetch_clamped(curl, grid_x - 1, grid_y)
    c_right = fetch_clamped(curl, grid_x + 1, grid_y)
    c_bottom = fetch_clamped(curl, grid_x, grid_y - 1)
    c_top = fetch_clamped(curl, grid_x, grid_y + 1)
    c_center = curl[grid_x, grid_y]

    # (d|w|/dy, d|w|/dx), so the y flip below is the 90 degree rotation
    force = 0.5 * wp.vec2(wp.abs(c_top) - wp.abs(c_bottom), wp.abs(c_right) - wp.abs(c_left))
    length = wp.length(force)

    velocity = velocity_in[grid_x, grid_y]
    if length > GRADIENT_EPSILON:
        force = force * (curl_strength * c_center / length)
        force = wp.vec2(force[0], -force[1])
        velocity = velocity + force * dt

    velocity_out[grid_x, grid_y] = wp.vec2(
        wp.clamp(velocity[0], -VELOCITY_LIMIT, VELOCITY_LIMIT),
        wp.clamp(velocity[1], -VELOCITY_LIMIT, VELOCITY_LIMIT),
    )
