import logging
import math

import numpy as np
import warp as wp

from simulator import FluidSimulator_WARP
from fluid_utils import *

wp.init()


class FluidSim_Wrapper:
    """
    Tick-driven fluid session: the only surface an external driver loop talks to.

    External code pushes splats with `enqueue_splat`, calls `advance(dt)` once per frame
    and reads the dye field back with `read_dye_field`. Nothing else touches field contents.
    """

    def __init__(self, config=None, config_file=None, device=None, logger=None):
        """
        Initialize a session.

        Args:
            config: FluidConfig to use (if provided)
            config_file: Path to JSON config file (if provided, config is ignored)
            device: Warp device to run on (default: current warp device)
            logger: logging.Logger to report to (default: module logger)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.device = device
        if config_file:
            self.config = FluidConfig.from_json(config_file)
        elif config:
            self.config = config.validate()
        else:
            self.config = FluidConfig()

        self.rng = np.random.default_rng(self.config.seed)
        self.splat_queue = SplatQueue()
        self.pointer_color = PointerColor(
            self.rng,
            update_speed=self.config.color_update_speed,
            colorful=self.config.colorful,
        )

        self.solver = FluidSimulator_WARP(
            self.config.sim_resolution,
            self.config.dye_resolution,
            device=device,
            logger=self.logger,
            verbose=self.config.verbose,
        )
        self._apply_solver_parameters()

        # Track current frame
        self.current_frame = 0

        amount = self.config.initial_splats
        if amount is None:
            amount = 5 + int(self.rng.integers(0, 20))
        self.random_splats(amount)

    def _apply_solver_parameters(self):
        self.solver.curl_strength = self.config.curl_strength
        self.solver.pressure_damping = self.config.pressure_damping
        self.solver.pressure_iterations = self.config.pressure_iterations
        self.solver.velocity_dissipation = self.config.velocity_dissipation
        self.solver.density_dissipation = self.config.density_dissipation
        self.solver.splat_radius = self.config.splat_radius
        self.solver.aspect_ratio = self.config.aspect_ratio
        self.solver.verbose = self.config.verbose
        self.pointer_color.update_speed = self.config.color_update_speed
        self.pointer_color.colorful = self.config.colorful

    def configure(self, **changes):
        """
        Change configuration options. The new configuration is validated as a whole
        before it replaces the current one; on ConfigurationError nothing changes.

        Resolution changes take effect at the start of the next advance().
        """
        self.config = self.config.replace(**changes)
        self._apply_solver_parameters()
        return self.config

    @property
    def paused(self):
        return self.config.paused

    @paused.setter
    def paused(self, value):
        self.configure(paused=bool(value))

    def enqueue_splat(self, uv, force, color):
        """
        Queue a splat for the next tick.

        Args:
            uv: (u, v) splat center in [0,1]^2
            force: (fx, fy) velocity added at the center, in simulation texels per second
            color: (r, g, b) dye added at the center
        """
        self.splat_queue.enqueue(SplatRequest.create(uv, force, color))

    def enqueue_pointer_motion(self, uv, delta):
        """Queue a splat for pointer motion: force scaled by splat_force, color from the pointer color timer."""
        scale = self.config.splat_force * 0.001
        force = (float(delta[0]) * scale, float(delta[1]) * scale)
        self.enqueue_splat(uv, force, self.pointer_color.color)

    def random_splats(self, amount):
        """Queue `amount` splats at random positions with random forces and bright random colors."""
        if amount > 0:
            self.logger.info("Enqueueing %d random splats", amount)
        for _ in range(amount):
            uv = self.rng.random(2)
            force = 1000.0 * self.rng.uniform(-0.5, 0.5, size=2)
            color = np.asarray(random_color(self.rng)) * 10.0
            self.enqueue_splat(uv, force, color)

    def _ensure_resolution(self):
        if self.solver.matches_resolution(self.config.sim_resolution, self.config.dye_resolution):
            return False
        self.logger.info(
            "Resolution changed to sim %d / dye %d, reallocating fields",
            self.config.sim_resolution, self.config.dye_resolution,
        )
        self.solver.initialize(self.config.sim_resolution, self.config.dye_resolution, device=self.solver.device)
        return True

    def apply_pending_splats(self):
        """Drain the splat queue and apply every request, in order, to the current fields."""
        splats = self.splat_queue.flush_all()
        for request in splats:
            self.solver.splat(request.uv, request.force, request.color)
        return len(splats)

    def advance(self, dt):
        """
        Run one tick.

        dt is clamped to [0, max_dt] and NaN counts as 0. Pending splats and the pointer
        color timer are processed even while paused; only the physical step is skipped.
        """
        dt = float(dt)
        if math.isnan(dt):
            dt = 0.0
        dt = min(max(dt, 0.0), self.config.max_dt)

        # Handle resize (in case values changed)
        self._ensure_resolution()

        self.pointer_color.update(dt)
        self.apply_pending_splats()

        if not self.config.paused:
            self.solver.step(dt)

        # Increment frame counter
        self.current_frame += 1

    def read_dye_field(self):
        """Current dye `read` buffer, a (dye_resolution, dye_resolution) warp array of vec4."""
        return self.solver.read_dye_field()

    def get_dye(self):
        return self.solver.read_dye_field().numpy()

    def get_velocity(self):
        return self.solver.read_velocity_field().numpy()

    def export_dye_to_torch(self):
        return self.solver.export_dye_to_torch()

    def export_velocity_to_torch(self):
        return self.solver.export_velocity_to_torch()

    def close(self):
        self.solver.release_all()
