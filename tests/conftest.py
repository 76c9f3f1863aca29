import numpy as np
import pytest
import warp as wp

from fluid_utils import FluidConfig
from sim_wrapper import FluidSim_Wrapper
from simulator import FluidSimulator_WARP

wp.init()

DEVICE = "cpu"


@pytest.fixture
def device():
    return DEVICE


@pytest.fixture
def make_solver():
    solvers = []

    def _make(sim_resolution=32, dye_resolution=32, **params):
        solver = FluidSimulator_WARP(sim_resolution, dye_resolution, device=DEVICE)
        for name, value in params.items():
            setattr(solver, name, value)
        solvers.append(solver)
        return solver

    yield _make
    for solver in solvers:
        solver.release_all()


@pytest.fixture
def make_sim():
    sims = []

    def _make(**overrides):
        options = dict(sim_resolution=32, dye_resolution=32, initial_splats=0, seed=1234)
        options.update(overrides)
        sim = FluidSim_Wrapper(config=FluidConfig.from_dict(options), device=DEVICE)
        sims.append(sim)
        return sim

    yield _make
    for sim in sims:
        sim.close()


def fill(field, values):
    """Overwrite a GridField with a numpy array of matching shape."""
    values = np.asarray(values, dtype=np.float32)
    wp.copy(field.data, wp.array(values, dtype=field.data.dtype, device=field.device))


def cell_centers(width, height):
    """UV coordinates of cell centers, each of shape (width, height)."""
    u = (np.arange(width) + 0.5) / width
    v = (np.arange(height) + 0.5) / height
    return np.meshgrid(u, v, indexing="ij")
