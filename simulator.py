import logging

import numpy as np
import torch
import warp as wp

from fluid_utils import *
from fluid_kernels import *

VELOCITY_CHANNELS = 2
DYE_CHANNELS = 4
SCALAR_CHANNELS = 1


class FluidSimulator_WARP:
    """
    Stable fluids solver on a collocated 2D grid.

    Owns the simulation state: double-buffered velocity (sim resolution), dye (dye
    resolution) and pressure (sim resolution), plus single-buffered divergence and
    curl scratch fields. Every pass launches one warp kernel over its output grid,
    reading the `read` half of a double buffer and writing the `write` half, then swaps.
    """

    def __init__(self, sim_resolution=128, dye_resolution=512, device=None, logger=None, verbose=False):
        self.logger = logger or logging.getLogger(__name__)
        self.verbose = verbose

        self.curl_strength = 30.0
        self.pressure_damping = 0.8
        self.pressure_iterations = 20  # Number of Jacobi pressure solver iterations
        self.velocity_dissipation = 0.2
        self.density_dissipation = 1.0
        self.splat_radius = 0.05
        self.aspect_ratio = 1.0

        self.velocity = None
        self.dye = None
        self.pressure = None
        self.divergence = None
        self.curl = None
        self.initialize(sim_resolution, dye_resolution, device=device)

    def initialize(self, sim_resolution, dye_resolution, device=None):
        """
        (Re)allocate every field, zero-initialized. Any previous fields are released first.

        Args:
            sim_resolution (int): Side length of the velocity / pressure grid.
            dye_resolution (int): Side length of the dye grid.
            device: Warp device for the fields (None = current warp device).
        """
        self.release_all()
        self.device = wp.get_device(device)

        self.velocity = allocate_double(sim_resolution, sim_resolution, VELOCITY_CHANNELS, device=self.device)
        self.dye = allocate_double(dye_resolution, dye_resolution, DYE_CHANNELS, device=self.device)
        self.pressure = allocate_double(sim_resolution, sim_resolution, SCALAR_CHANNELS, device=self.device)
        self.divergence = allocate(sim_resolution, sim_resolution, SCALAR_CHANNELS, device=self.device)
        self.curl = allocate(sim_resolution, sim_resolution, SCALAR_CHANNELS, device=self.device)

        self.time = 0.0
        self.logger.info(
            "Allocated fields: velocity %dx%d, dye %dx%d on %s",
            self.velocity.width, self.velocity.height, self.dye.width, self.dye.height, self.device,
        )

    def release_all(self):
        live = self.velocity is not None and not self.velocity.released
        for field in (self.velocity, self.dye, self.pressure, self.divergence, self.curl):
            release(field)
        if live:
            self.logger.info("Released fields")

    def matches_resolution(self, sim_resolution, dye_resolution):
        """True if the live buffers already have the requested resolutions."""
        if self.velocity is None or self.velocity.released:
            return False
        return self.velocity.width == sim_resolution and self.dye.width == dye_resolution

    @property
    def sim_grid_size(self):
        return (self.velocity.width, self.velocity.height)

    @property
    def dye_grid_size(self):
        return (self.dye.width, self.dye.height)

    def _log_pass(self, name, field):
        if self.verbose:
            self.logger.debug("%s completed, read = %dx%d", name, field.width, field.height)

    def corrected_radius(self):
        """Splat radius stretched by the aspect ratio on wide viewports."""
        radius = self.splat_radius
        if self.aspect_ratio > 1.0:
            radius *= self.aspect_ratio
        return radius

    def splat(self, uv, force, color):
        """
        Apply one splat: a radial force added to velocity, then a radial color added to dye.

        Args:
            uv: 2-vector, splat center in [0,1]^2
            force: 2-vector, velocity added at the center in simulation texels per second
            color: 3-vector, RGB added to the dye at the center
        """
        point = wp.vec2(float(uv[0]), float(uv[1]))
        radius = self.corrected_radius()

        # Velocity splat
        wp.launch(
            kernel=splat_velocity,
            dim=self.sim_grid_size,
            inputs=[
                self.velocity.read.data,
                self.velocity.model(),
                point,
                wp.vec2(float(force[0]), float(force[1])),
                radius,
                float(self.aspect_ratio),
                self.velocity.write.data,
            ],
            device=self.device,
        )
        self.velocity.swap()
        self._log_pass("Splat velocity", self.velocity.read)

        # Dye splat
        wp.launch(
            kernel=splat_dye,
            dim=self.dye_grid_size,
            inputs=[
                self.dye.read.data,
                self.dye.model(),
                point,
                wp.vec3(float(color[0]), float(color[1]), float(color[2])),
                radius,
                float(self.aspect_ratio),
                self.dye.write.data,
            ],
            device=self.device,
        )
        self.dye.swap()
        self._log_pass("Splat dye", self.dye.read)

    def compute_curl(self):
        wp.launch(
            kernel=compute_curl,
            dim=self.sim_grid_size,
            inputs=[self.velocity.read.data, self.curl.data],
            device=self.device,
        )

    def apply_vorticity(self, dt):
        wp.launch(
            kernel=apply_vorticity,
            dim=self.sim_grid_size,
            inputs=[
                self.velocity.read.data,
                self.curl.data,
                float(self.curl_strength),
                float(dt),
                self.velocity.write.data,
            ],
            device=self.device,
        )
        self.velocity.swap()
        self._log_pass("Vorticity", self.velocity.read)

    def compute_divergence(self):
        wp.launch(
            kernel=compute_divergence,
            dim=self.sim_grid_size,
            inputs=[self.velocity.read.data, self.divergence.data],
            device=self.device,
        )

    def damp_pressure(self):
        """Scale last tick's pressure by pressure_damping instead of clearing it."""
        wp.launch(
            kernel=scale_pressure,
            dim=self.sim_grid_size,
            inputs=[self.pressure.read.data, float(self.pressure_damping), self.pressure.write.data],
            device=self.device,
        )
        self.pressure.swap()
        self._log_pass("Pressure damping", self.pressure.read)

    def solve_pressure(self, iterations=None):
        """Run the Jacobi pressure iterations, swapping the pressure buffers after each one."""
        if iterations is None:
            iterations = self.pressure_iterations
        for i in range(iterations):
            wp.launch(
                kernel=jacobi_pressure_iteration,
                dim=self.sim_grid_size,
                inputs=[self.pressure.read.data, self.divergence.data, self.pressure.write.data],
                device=self.device,
            )
            self.pressure.swap()
            if self.verbose:
                self.logger.debug("Pressure iteration %d completed", i)

    def subtract_gradient(self):
        wp.launch(
            kernel=subtract_pressure_gradient,
            dim=self.sim_grid_size,
            inputs=[self.velocity.read.data, self.pressure.read.data, self.velocity.write.data],
            device=self.device,
        )
        self.velocity.swap()
        self._log_pass("Gradient subtract", self.velocity.read)

    def project(self, iterations=None):
        """Divergence, pressure damping, Jacobi solve and gradient subtraction."""
        self.compute_divergence()
        self.damp_pressure()
        self.solve_pressure(iterations)
        self.subtract_gradient()

    def advect_velocity(self, dt):
        wp.launch(
            kernel=advect_velocity,
            dim=self.sim_grid_size,
            inputs=[
                self.velocity.read.data,
                self.velocity.model(),
                float(dt),
                float(self.velocity_dissipation),
                self.velocity.write.data,
            ],
            device=self.device,
        )
        self.velocity.swap()
        self._log_pass("Advect velocity", self.velocity.read)

    def advect_dye(self, dt):
        wp.launch(
            kernel=advect_dye,
            dim=self.dye_grid_size,
            inputs=[
                self.velocity.read.data,
                self.velocity.model(),
                self.dye.read.data,
                self.dye.model(),
                float(dt),
                float(self.density_dissipation),
                self.dye.write.data,
            ],
            device=self.device,
        )
        self.dye.swap()
        self._log_pass("Advect dye", self.dye.read)

    def step(self, dt):
        """
        Advance the fields by one time step. The pass order is fixed, each pass
        consumes the previous pass's output.

        Args:
            dt (float): Time step, expected to be clamped by the caller.
        """
        # Vorticity (curl)
        self.compute_curl()
        self.apply_vorticity(dt)

        # Divergence, pressure damping, Jacobi iterations, gradient subtraction
        self.project()

        # Advect velocity, then dye through the projected velocity
        self.advect_velocity(dt)
        self.advect_dye(dt)

        self.time = self.time + dt

    def mean_abs_divergence(self):
        """Mean |div(v)| of the current velocity field. Overwrites the divergence scratch field."""
        self.compute_divergence()
        return float(np.mean(np.abs(self.divergence.numpy())))

    def read_dye_field(self):
        return self.dye.read.data

    def read_velocity_field(self):
        return self.velocity.read.data

    def import_velocity_from_numpy(self, velocity):
        """Replace the velocity field with an (width, height, 2) array."""
        velocity = np.asarray(velocity, dtype=np.float32)
        if velocity.shape != (self.velocity.width, self.velocity.height, VELOCITY_CHANNELS):
            raise ValueError(
                f"velocity must be shape {(self.velocity.width, self.velocity.height, VELOCITY_CHANNELS)}, got {velocity.shape}"
            )
        wp.copy(self.velocity.read.data, wp.array(velocity, dtype=wp.vec2, device=self.device))

    def export_dye_to_torch(self) -> torch.Tensor:
        return wp.to_torch(self.dye.read.data)

    def export_velocity_to_torch(self) -> torch.Tensor:
        return wp.to_torch(self.velocity.read.data)
