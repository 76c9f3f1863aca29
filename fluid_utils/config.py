"""
Configuration data structure for the fluid solver: grid resolutions, dissipation, solver and splat parameters.
"""
import json
import math
from typing import Dict, List, Optional

from fluid_utils.errors import ConfigurationError


class FluidConfig:
    """Tunable parameters of a fluid simulation session."""

    FIELDS = (
        "sim_resolution", "dye_resolution",
        "density_dissipation", "velocity_dissipation",
        "curl_strength", "pressure_damping", "pressure_iterations",
        "splat_radius", "splat_force",
        "paused", "max_dt", "aspect_ratio",
        "colorful", "color_update_speed",
        "shading", "background_color",
        "initial_splats", "seed", "verbose",
    )

    def __init__(self, sim_resolution: int = 128, dye_resolution: int = 512,
                 density_dissipation: float = 1.0, velocity_dissipation: float = 0.2,
                 curl_strength: float = 30.0, pressure_damping: float = 0.8,
                 pressure_iterations: int = 20,
                 splat_radius: float = 0.05, splat_force: float = 6000.0,
                 paused: bool = False, max_dt: float = 1.0 / 60.0, aspect_ratio: float = 1.0,
                 colorful: bool = True, color_update_speed: float = 10.0,
                 shading: bool = True, background_color: Optional[List[float]] = None,
                 initial_splats: Optional[int] = None, seed: Optional[int] = None,
                 verbose: bool = False):
        """
        Initialize a configuration.

        Args:
            sim_resolution: Side length of the square velocity/pressure grid
            dye_resolution: Side length of the square dye grid, independent of sim_resolution
            density_dissipation: Dye decay rate (0 = no decay)
            velocity_dissipation: Velocity decay rate (0 = no decay)
            curl_strength: Vorticity confinement strength (0 disables confinement)
            pressure_damping: Factor applied to last tick's pressure before the Jacobi solve, in [0, 1]
            pressure_iterations: Number of Jacobi iterations per tick
            splat_radius: Gaussian radius of a splat in UV units, in (0, 1]
            splat_force: Scale from pointer motion to splat force
            paused: Skip the physical step while still applying splats
            max_dt: Upper bound on the time step of a tick
            aspect_ratio: Viewport width / height, used to keep splats circular on screen
            colorful: Cycle the pointer color over time
            color_update_speed: Pointer color timer speed
            shading: Shading flag forwarded to the compositor
            background_color: RGB background forwarded to the compositor
            initial_splats: Number of random splats at start (None = random 5..24)
            seed: Seed for random splats and colors (None = nondeterministic)
            verbose: Log every pass at DEBUG level
        """
        self.sim_resolution = sim_resolution
        self.dye_resolution = dye_resolution
        self.density_dissipation = density_dissipation
        self.velocity_dissipation = velocity_dissipation
        self.curl_strength = curl_strength
        self.pressure_damping = pressure_damping
        self.pressure_iterations = pressure_iterations
        self.splat_radius = splat_radius
        self.splat_force = splat_force
        self.paused = paused
        self.max_dt = max_dt
        self.aspect_ratio = aspect_ratio
        self.colorful = colorful
        self.color_update_speed = color_update_speed
        self.shading = shading
        self.background_color = list(background_color) if background_color is not None else [0.0, 0.0, 0.0]
        self.initial_splats = initial_splats
        self.seed = seed
        self.verbose = verbose

    def validate(self) -> 'FluidConfig':
        """Check every option. Raises ConfigurationError on the first out-of-range value."""
        for name in ("sim_resolution", "dye_resolution", "pressure_iterations"):
            _require_int(name, getattr(self, name), minimum=1)
        for name in ("density_dissipation", "velocity_dissipation", "curl_strength", "color_update_speed"):
            _require_number(name, getattr(self, name))
            if getattr(self, name) < 0.0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
        _require_number("pressure_damping", self.pressure_damping)
        if not 0.0 <= self.pressure_damping <= 1.0:
            raise ConfigurationError(f"pressure_damping must be in [0, 1], got {self.pressure_damping}")
        _require_number("splat_radius", self.splat_radius)
        if not 0.0 < self.splat_radius <= 1.0:
            raise ConfigurationError(f"splat_radius must be in (0, 1], got {self.splat_radius}")
        _require_number("splat_force", self.splat_force)
        for name in ("max_dt", "aspect_ratio"):
            _require_number(name, getattr(self, name))
            if getattr(self, name) <= 0.0:
                raise ConfigurationError(f"{name} must be > 0, got {getattr(self, name)}")
        for name in ("paused", "colorful", "shading", "verbose"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a bool, got {getattr(self, name)!r}")
        if len(self.background_color) != 3:
            raise ConfigurationError(f"background_color must have 3 components, got {self.background_color}")
        for c in self.background_color:
            _require_number("background_color", c)
            if not 0.0 <= c <= 1.0:
                raise ConfigurationError(f"background_color components must be in [0, 1], got {self.background_color}")
        if self.initial_splats is not None:
            _require_int("initial_splats", self.initial_splats, minimum=0)
        if self.seed is not None:
            _require_int("seed", self.seed, minimum=0)
        return self

    def replace(self, **changes) -> 'FluidConfig':
        """Return a validated copy with the given options changed."""
        data = self.to_dict()
        data.update(changes)
        return FluidConfig.from_dict(data)

    def to_dict(self) -> Dict:
        """Convert config to dictionary for JSON serialization."""
        data = {name: getattr(self, name) for name in self.FIELDS}
        data["background_color"] = list(self.background_color)
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'FluidConfig':
        """Create a validated config from a dictionary. Unknown keys are rejected."""
        unknown = sorted(set(data) - set(cls.FIELDS))
        if unknown:
            raise ConfigurationError(f"unknown configuration options: {', '.join(unknown)}")
        return cls(**data).validate()

    @classmethod
    def from_json(cls, filepath: str) -> 'FluidConfig':
        """Load config from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, filepath: str):
        """Save config to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def __eq__(self, other):
        return isinstance(other, FluidConfig) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"FluidConfig({self.to_dict()})"


def _require_number(name, value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")


def _require_int(name, value, minimum):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
