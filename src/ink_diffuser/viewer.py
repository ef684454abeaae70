"""
Ink Diffuser.

Copyright (c) 2026 Shuoqi Chen
SPDX-License-Identifier: MIT OR Apache-2.0
"""
import logging
import time
from collections import deque

import taichi as ti

from .brush import InkEngine, InkParams
from .config import load_params

_logger = logging.getLogger(__name__)


def _build_parser():
    import argparse
    from dataclasses import fields

    parser = argparse.ArgumentParser(description="Ink Diffuser: paint ink and watch it spread")
    parser.add_argument("-W", "--width", type=int, default=256, help="Grid width in cells (default: 256)")
    parser.add_argument("-H", "--height", type=int, default=256, help="Grid height in cells (default: 256)")
    parser.add_argument("--scale", type=int, default=3, help="Window pixels per grid cell (default: 3)")
    parser.add_argument("-f", "--fps", type=int, default=60, help="Target FPS cap (default: 60)")
    parser.add_argument("-s", "--substeps", type=int, default=1, help="Simulation ticks per frame (default: 1)")
    parser.add_argument("--arch", default="gpu", help="Taichi backend: cpu, gpu, cuda, vulkan or metal (default: gpu)")
    parser.add_argument("-c", "--config", default=None, help="JSON file with simulation parameters")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine diagnostics")

    # Add InkParams as arguments automatically; they override the config file
    for f in fields(InkParams):
        if f.name.endswith("_rgb"):
            continue  # Skip complex types for CLI
        arg_name = f.name.replace("_", "-")
        parser.add_argument(f"--{arg_name}", type=float, default=None, help=f.metadata.get("help", ""))
    return parser


def _params_from_args(args) -> InkParams:
    from dataclasses import fields

    params = load_params(args.config).to_dict()
    for f in fields(InkParams):
        value = getattr(args, f.name, None)
        if value is not None:
            params[f.name] = value
    return InkParams.from_dict(params)


def cursor_to_grid(mx: float, my: float, width: int, height: int):
    """Maps a [0, 1] window position to grid coordinates with cell centers on integers."""
    return mx * width - 0.5, my * height - 0.5


def _save_screenshot(engine: InkEngine):
    import PIL.Image

    # Grid is (x, y) with y up; images are (row, col) with row 0 at the top.
    img = engine.render().transpose(1, 0, 2)[::-1]
    path = f"ink_{int(time.time())}.png"
    PIL.Image.fromarray(img).save(path)
    print(f"Saved screenshot to {path}")


def launch_viewer():
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    params = _params_from_args(args)
    W, H = args.width, args.height

    print(f"\n[InkDiffuser] Starting")
    print(f" - Grid:       {W}x{H} (x{args.scale})")
    print(f" - Backend:    {args.arch.upper()}")
    print(f" - FPS Cap:    {args.fps}")
    print(f" - Substeps:   {args.substeps}")
    print(f"--------------------------------")

    engine = InkEngine(W, H, params=params, arch=args.arch)
    engine.timing_mode = args.verbose
    engine.warmup()

    window = ti.ui.Window("Ink Diffuser", (W * args.scale, H * args.scale))
    canvas = window.get_canvas()

    print("\n[Controls]")
    print(" - Mouse Left (LMB): Paint ink")
    print(" - Mouse Right (RMB): Erase")
    print(" - Space: Clear Canvas")
    print(" - S: Save Screenshot")
    print(" - Esc: Quit")

    fps_limit = args.fps
    last_cell = None
    frame_counter = 0
    fps_values = deque(maxlen=5)
    last_stat_time = time.time()

    while window.running:
        frame_start = time.time()

        for e in window.get_events(ti.ui.PRESS):
            if e.key == ti.ui.SPACE:
                engine.clear()
            elif e.key == "s":
                _save_screenshot(engine)
            elif e.key == ti.ui.ESCAPE:
                window.running = False

        painting = window.is_pressed(ti.ui.LMB)
        erasing = window.is_pressed(ti.ui.RMB)
        if painting or erasing:
            # ti.ui.Window (GGUI) uses [0,1] with origin at BOTTOM-LEFT, as does the grid.
            mx, my = window.get_cursor_pos()
            cell = cursor_to_grid(mx, my, W, H)
            # Join with the previous sample so fast drags leave no gaps.
            if last_cell is None:
                engine.add_stroke([cell], erase=erasing and not painting)
            else:
                engine.add_stroke([last_cell, cell], erase=erasing and not painting, continues=True)
            last_cell = cell
        else:
            last_cell = None

        for _ in range(args.substeps):
            engine.tick()

        canvas.set_image(engine.framebuffer.image)
        window.show()
        frame_counter += 1

        now = time.time()
        if now - last_stat_time > 2.0:
            fps_values.append(frame_counter / (now - last_stat_time))
            frame_counter = 0
            last_stat_time = now
            _logger.info("FPS %.1f | ink %.2f", sum(fps_values) / len(fps_values), engine.total_ink())

        # Enforce FPS cap to prevent resource hogging
        elapsed = time.time() - frame_start
        if elapsed < 1.0 / fps_limit:
            time.sleep(1.0 / fps_limit - elapsed)


if __name__ == "__main__":
    launch_viewer()
