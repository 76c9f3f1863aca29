# Interactive viewer / headless driver loop for the fluid solver.
# The viewer plays the part of the output compositor and input adapter:
# it composes the dye field into an image and turns mouse drags into splats.
import argparse
import logging
import time

import numpy as np
import polyscope as ps
import polyscope.imgui as psim
import warp as wp

from fluid_utils import FluidConfig
from sim_wrapper import FluidSim_Wrapper

wp.init() #initialize warp

sim = None

#Global variables for UI
config_file_path = None
last_frame_time = None
last_mouse_pos = None


def compose_image(dye, shading=True, background=(0.0, 0.0, 0.0)):
    """
    Turn a (width, height, 4) dye array into a (height, width, 3) RGB image in [0, 1].

    With shading on, dye luminance gradients are treated as a height field and lit from
    the viewer, diffuse = clamp(n.z + 0.7, 0.7, 1.0). The background shows through where
    the dye is faint.
    """
    rgb = np.clip(np.transpose(dye[..., :3], (1, 0, 2)), 0.0, None)
    if shading:
        luminance = rgb.max(axis=2)
        dy, dx = np.gradient(luminance)
        n = np.stack([dx, dy, np.full_like(luminance, 1.0)], axis=2)
        n /= np.linalg.norm(n, axis=2, keepdims=True)
        diffuse = np.clip(n[..., 2] + 0.7, 0.7, 1.0)
        rgb = rgb * diffuse[..., None]
    alpha = np.clip(rgb.max(axis=2, keepdims=True), 0.0, 1.0)
    image = rgb + np.asarray(background, dtype=np.float32) * (1.0 - alpha)
    return np.clip(image, 0.0, 1.0)


def read_dye():
    image = compose_image(sim.get_dye(), sim.config.shading, sim.config.background_color)
    ps.add_color_image_quantity("dye", image, image_origin="lower_left", enabled=True, show_fullscreen=True)


def simulation_init(config_file=None, device="cpu"):
    global sim
    print("Initialized Sim")
    if config_file:
        print(f"Loading config from: {config_file}")
        sim = FluidSim_Wrapper(config_file=config_file, device=device)
    else:
        sim = FluidSim_Wrapper(device=device)
    read_dye()


def handle_mouse():
    global last_mouse_pos
    io = psim.GetIO()
    if io.WantCaptureMouse or not psim.IsMouseDown(0):
        last_mouse_pos = None
        return
    width, height = ps.get_window_size()
    x, y = io.MousePos
    if last_mouse_pos is not None:
        delta = (x - last_mouse_pos[0], -(y - last_mouse_pos[1]))
        uv = (x / width, 1.0 - y / height)
        sim.enqueue_pointer_motion(uv, delta)
    last_mouse_pos = (x, y)


def ui_callback():
    global last_frame_time
    now = time.perf_counter()
    dt = 0.0 if last_frame_time is None else now - last_frame_time
    last_frame_time = now

    changed, paused = psim.Checkbox("Paused", sim.paused)
    if changed:
        sim.paused = paused

    changed, shading = psim.Checkbox("Shading", sim.config.shading)
    if changed:
        sim.configure(shading=shading)

    if psim.Button("Random Splats"):
        sim.random_splats(5 + int(sim.rng.integers(0, 20)))

    #reset button
    if psim.Button("Reset Simulation"):
        print("Resetting Simulation")
        sim.close()
        simulation_init(config_file=config_file_path, device=sim.device)

    handle_mouse()
    sim.advance(dt)
    read_dye()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Stable fluids splat simulation")
    parser.add_argument("--config", help="Path to the JSON config file")
    parser.add_argument("--num_steps", help="Run headless for this many ticks and print field statistics", type=int)
    parser.add_argument("--dt", help="Tick length for headless runs", type=float, default=1.0 / 60.0)
    parser.add_argument("--device", help="Device to use", type=str, default="cpu")
    parser.add_argument("--log_level", help="Logging level", type=str, default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    wp.set_device(args.device)
    config_file_path = args.config

    if args.num_steps:
        config = FluidConfig.from_json(args.config) if args.config else FluidConfig()
        sim = FluidSim_Wrapper(config=config, device=args.device)
        for k in range(args.num_steps):
            sim.advance(args.dt)
            dye = sim.get_dye()
            velocity = sim.get_velocity()
            print(
                f"Step {k}: max |v| = {np.abs(velocity).max():.4f}, "
                f"mean |div v| = {sim.solver.mean_abs_divergence():.6f}, "
                f"dye total = {dye[..., :3].sum():.4f}"
            )
        exit()

    # initialize polyscope
    ps.init()
    ps.set_ground_plane_mode("none")

    simulation_init(config_file=args.config, device=args.device)

    ps.set_user_callback(ui_callback)
    ps.show()
