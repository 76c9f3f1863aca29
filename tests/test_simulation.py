import logging

import numpy as np
import pytest
import torch

from fluid_utils import ConfigurationError
from fluid_utils.colors import DEFAULT_POINTER_COLOR

DT = 1.0 / 60.0


def test_end_to_end_single_splat(make_sim):
    sim = make_sim(
        sim_resolution=128, dye_resolution=256,
        density_dissipation=0.0, velocity_dissipation=0.0, curl_strength=0.0,
    )
    sim.enqueue_splat((0.5, 0.5), (100.0, 0.0), (1.0, 0.5, 0.25))
    sim.advance(DT)

    velocity = sim.get_velocity()
    dye = sim.get_dye()
    assert velocity.shape == (128, 128, 2)
    assert dye.shape == (256, 256, 4)

    # right of center
    assert velocity[70, 64, 0] > 1.0
    # far from center
    assert np.abs(velocity[:13, :13]).max() < 1e-3
    assert np.abs(dye[:26, :26, :3]).max() < 1e-3

    assert dye[128, 128, 0] > 0.5
    assert dye[128, 128, 1] > 0.25

    speed = np.linalg.norm(velocity, axis=2)
    velocity_area = np.mean(speed > 0.1 * speed.max())
    dye_area = np.mean(dye[..., 0] > 0.1 * dye[..., 0].max())
    assert 0.25 < dye_area / velocity_area < 4.0


def test_no_splats_keeps_fields_zero(make_sim):
    sim = make_sim()
    for _ in range(5):
        sim.advance(DT)
    assert np.all(sim.get_velocity() == 0.0)
    assert np.all(sim.get_dye() == 0.0)


def test_dt_is_clamped(make_sim):
    clamped = make_sim()
    reference = make_sim()
    for sim in (clamped, reference):
        sim.enqueue_splat((0.4, 0.6), (50.0, -20.0), (1.0, 1.0, 1.0))
    clamped.advance(1.0)
    reference.advance(DT)
    np.testing.assert_allclose(clamped.get_velocity(), reference.get_velocity(), rtol=1e-5, atol=1e-6)
    assert clamped.solver.time == pytest.approx(DT)


def test_non_finite_dt_does_not_poison_fields(make_sim):
    sim = make_sim()
    sim.enqueue_splat((0.5, 0.5), (50.0, 0.0), (1.0, 1.0, 1.0))
    sim.advance(float("nan"))
    assert sim.solver.time == 0.0
    assert np.all(np.isfinite(sim.get_velocity()))
    assert np.all(np.isfinite(sim.get_dye()))

    sim.advance(float("inf"))
    assert sim.solver.time == pytest.approx(DT)
    assert np.all(np.isfinite(sim.get_velocity()))


def test_non_finite_configuration_never_reaches_a_step(make_sim):
    sim = make_sim()
    for changes in ({"max_dt": float("nan")}, {"velocity_dissipation": float("inf")}):
        with pytest.raises(ConfigurationError):
            sim.configure(**changes)
    sim.enqueue_splat((0.5, 0.5), (50.0, 0.0), (1.0, 1.0, 1.0))
    sim.advance(0.0)
    sim.advance(5.0)
    assert sim.solver.time == pytest.approx(DT)
    assert np.all(np.isfinite(sim.get_velocity()))


def test_splats_apply_while_paused(make_sim):
    radius = 0.05
    sim = make_sim(paused=True, splat_radius=radius)
    sim.enqueue_splat((0.5, 0.5), (40.0, 0.0), (1.0, 1.0, 1.0))
    sim.advance(DT)

    assert len(sim.splat_queue) == 0
    assert sim.solver.time == 0.0
    # the raw splat, untouched by projection or advection
    u = (np.arange(32) + 0.5) / 32
    uu, vv = np.meshgrid(u, u, indexing="ij")
    expected = 40.0 * np.exp(-((uu - 0.5) ** 2 + (vv - 0.5) ** 2) / radius ** 2)
    np.testing.assert_allclose(sim.get_velocity()[..., 0], expected, atol=1e-3)

    sim.paused = False
    sim.advance(DT)
    assert sim.solver.time == pytest.approx(DT)


def test_queue_is_drained_each_tick(make_sim):
    sim = make_sim()
    for i in range(3):
        sim.enqueue_splat((0.2 * (i + 1), 0.5), (10.0, 0.0), (0.1, 0.1, 0.1))
    assert len(sim.splat_queue) == 3
    sim.advance(DT)
    assert len(sim.splat_queue) == 0


def test_resolution_change_reallocates_and_keeps_queued_splats(make_sim):
    sim = make_sim(sim_resolution=32, dye_resolution=32, paused=True)
    sim.enqueue_splat((0.5, 0.5), (10.0, 0.0), (1.0, 0.0, 0.0))
    sim.advance(DT)
    old_velocity = sim.solver.velocity

    sim.configure(sim_resolution=25, dye_resolution=41)
    sim.enqueue_splat((0.5, 0.5), (10.0, 0.0), (1.0, 0.0, 0.0))
    sim.advance(DT)

    assert old_velocity.released
    assert sim.get_velocity().shape == (25, 25, 2)
    assert sim.get_dye().shape == (41, 41, 4)
    assert sim.solver.pressure.width == 25
    assert sim.solver.curl.width == 25
    # fields start from zero, so only the second splat is present
    assert sim.get_velocity()[12, 12, 0] == pytest.approx(10.0, rel=0.05)
    assert sim.get_dye()[20, 20, 0] == pytest.approx(1.0, rel=0.05)


def test_invalid_configuration_keeps_previous(make_sim):
    sim = make_sim(pressure_iterations=10)
    with pytest.raises(ConfigurationError):
        sim.configure(pressure_iterations=0)
    assert sim.config.pressure_iterations == 10
    assert sim.solver.pressure_iterations == 10
    with pytest.raises(ConfigurationError):
        sim.configure(sim_resolution=-1)
    sim.advance(DT)
    assert sim.get_velocity().shape == (32, 32, 2)


def test_configure_updates_solver(make_sim):
    sim = make_sim()
    sim.configure(curl_strength=5.0, pressure_damping=0.5, splat_radius=0.1)
    assert sim.solver.curl_strength == 5.0
    assert sim.solver.pressure_damping == 0.5
    assert sim.solver.splat_radius == 0.1


def test_initial_random_splats(make_sim):
    assert len(make_sim(initial_splats=3).splat_queue) == 3
    burst = len(make_sim(initial_splats=None).splat_queue)
    assert 5 <= burst < 25


def test_random_splats_are_deterministic_with_seed(make_sim):
    a = make_sim(initial_splats=4, seed=99)
    b = make_sim(initial_splats=4, seed=99)
    assert a.splat_queue.flush_all() == b.splat_queue.flush_all()


def test_pointer_motion_uses_force_scale_and_pointer_color(make_sim):
    sim = make_sim(splat_force=2000.0, colorful=False)
    sim.enqueue_pointer_motion((0.5, 0.5), (3.0, -1.0))
    (request,) = sim.splat_queue.flush_all()
    assert request.force == pytest.approx((6.0, -2.0))
    assert request.color == pytest.approx(DEFAULT_POINTER_COLOR)


def test_pointer_color_cycles_while_paused(make_sim):
    sim = make_sim(paused=True, color_update_speed=100.0)
    sim.advance(DT)
    assert sim.pointer_color.color != DEFAULT_POINTER_COLOR


def test_dye_read_out(make_sim):
    sim = make_sim(dye_resolution=48)
    sim.enqueue_splat((0.5, 0.5), (0.0, 0.0), (1.0, 1.0, 1.0))
    sim.advance(DT)

    field = sim.read_dye_field()
    assert field.shape == (48, 48)
    tensor = sim.export_dye_to_torch()
    assert isinstance(tensor, torch.Tensor)
    assert tuple(tensor.shape) == (48, 48, 4)
    np.testing.assert_allclose(tensor.cpu().numpy(), sim.get_dye())


def test_fields_are_released_once(make_sim, caplog):
    sim = make_sim()
    with caplog.at_level(logging.INFO):
        sim.close()
        sim.close()
    assert [r.getMessage() for r in caplog.records].count("Released fields") == 1
