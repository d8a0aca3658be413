"""
snowglobe command line.

  snowglobe scenes
  snowglobe record winter --format gif --out-dir exports
  snowglobe record custom --features snow,cat --base-color "#1e3a8a" --format webm
  snowglobe still jellyfish --ticks 600 --out jelly.png
  snowglobe preview carousel      # n = next scene, g = gif, v = video, q/Esc = quit
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import cv2
from tqdm import tqdm

from .capture import CaptureController
from .config import (
    CAPTURE_PRESETS,
    CUSTOM_FEATURES,
    DEFAULT_FPS,
    SCENE_LABELS,
    CustomSceneConfig,
    SceneId,
    apply_preset_defaults,
    default_text_for,
)
from .engine import Globe
from .scheduler import RenderLoop
from .util import SnowglobeError, die, log, safe_slug

WINDOW = "snowglobe"


# ============================================================
# Arguments
# ============================================================


def add_scene_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("scene", help="Scene id (see `snowglobe scenes`)")
    ap.add_argument("--text", default=None, help="Pedestal engraving (max 20 chars; default: scene text)")
    ap.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    ap.add_argument("--size", type=int, default=None, help="Canvas side in pixels (default: 700)")

    g = ap.add_argument_group("custom scene")
    g.add_argument(
        "--features",
        default=None,
        help=f"Comma-separated toggles for the custom scene ({','.join(CUSTOM_FEATURES)})",
    )
    g.add_argument("--background-color", default=None)
    g.add_argument("--base-color", default=None)
    g.add_argument("--text-color", default=None)


def add_capture_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--format", choices=sorted(CAPTURE_PRESETS), default="gif")
    ap.add_argument("--out-dir", default=".", help="Directory for exports")
    ap.add_argument("--fps", type=float, default=None, help="Capture fps (default: from format preset)")
    ap.add_argument("--duration-ms", type=int, default=None, help="Capture length (default: from format preset)")
    ap.add_argument("--seconds", type=float, default=None, help="Capture length in seconds (shorthand for --duration-ms)")
    ap.add_argument("--scale", type=float, default=None, help="Frame scale (gif preset halves frames)")
    ap.add_argument("--encoder", default=None, help="ffmpeg video encoder (libvpx-vp9, libx264, ...)")
    ap.add_argument("--crf", type=int, default=None)
    ap.add_argument("--warmup", type=int, default=60, help="Ticks to run before capture starts")


def custom_config_from_args(args: argparse.Namespace) -> CustomSceneConfig:
    cfg = CustomSceneConfig()
    if args.features is not None:
        names = [n.strip().replace("-", "_") for n in args.features.split(",") if n.strip()]
        cfg = cfg.with_features(names)
    colors = {
        "background_color": args.background_color,
        "base_color": args.base_color,
        "text_color": args.text_color,
    }
    colors = {k: v for k, v in colors.items() if v is not None}
    if colors:
        data = {name: getattr(cfg, name) for name in CUSTOM_FEATURES}
        data.update(colors)
        cfg = CustomSceneConfig.from_mapping(data)
    return cfg


def make_globe(args: argparse.Namespace) -> Globe:
    try:
        scene = SceneId.parse(args.scene)
        custom = custom_config_from_args(args)
        return Globe(scene, text=args.text, custom=custom, seed=args.seed, size=args.size)
    except (SnowglobeError, ValueError) as exc:
        die(str(exc))


# ============================================================
# Commands
# ============================================================


def cmd_scenes(args: argparse.Namespace) -> None:
    for sid in SceneId:
        print(f"{sid.value:<12} {SCENE_LABELS[sid]:<20} {default_text_for(sid)!r}")


def cmd_still(args: argparse.Namespace) -> None:
    globe = make_globe(args)
    for _ in tqdm(range(max(0, args.ticks)), desc="sim", unit="tick", disable=args.ticks < 120):
        globe.update()
    frame = globe.render_frame()
    out = Path(args.out or f"magic-globe-{safe_slug(globe.scene_id.value)}.png")
    out.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(out), frame):
        die(f"Could not write {out}")
    log(f"wrote {out}")


async def _record(args: argparse.Namespace, globe: Globe) -> bool:
    loop = RenderLoop(globe, fps=DEFAULT_FPS)
    controller = CaptureController(globe, out_dir=args.out_dir, progress=True)
    globe.advance(args.warmup)
    loop.start()
    try:
        result = await controller.capture(
            args.format,
            fps=args.fps,
            duration_ms=args.duration_ms,
            scale=args.scale,
            encoder=args.encoder,
            crf=args.crf,
        )
    finally:
        await loop.stop()
    if loop.error is not None:
        log(f"render loop error: {loop.error!r}")
    if result.ok:
        log(f"export: {result.path} ({result.size_bytes} bytes, {result.frames} frames)")
    else:
        log(f"export failed: {result.error}")
    return result.ok


def cmd_record(args: argparse.Namespace, argv: List[str]) -> None:
    if args.seconds is not None:
        args.duration_ms = int(round(args.seconds * 1000))
        argv = [*argv, "--duration-ms"]
    apply_preset_defaults(args, argv)
    globe = make_globe(args)
    ok = asyncio.run(_record(args, globe))
    if not ok:
        raise SystemExit(1)


async def _preview(args: argparse.Namespace, globe: Globe) -> None:
    loop = RenderLoop(globe, fps=DEFAULT_FPS)
    controller = CaptureController(globe, out_dir=args.out_dir)
    quit_event = asyncio.Event()
    pending: set = set()
    order = list(SceneId)

    def spawn(coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        pending.add(task)
        task.add_done_callback(pending.discard)

    def on_frame(frame) -> None:
        cv2.imshow(WINDOW, frame)
        key = cv2.waitKey(1) & 0xFF
        if key in (ord("q"), 27):
            quit_event.set()
        elif key == ord("n"):
            nxt = order[(order.index(globe.scene_id) + 1) % len(order)]
            spawn(loop.switch_scene(nxt))
        elif key == ord("g"):
            spawn(controller.capture("gif"))
        elif key == ord("v"):
            spawn(controller.capture("webm"))

    loop.add_listener(on_frame)
    loop.start()
    waiter = asyncio.ensure_future(quit_event.wait())
    try:
        # stop when the user quits or the loop dies on its own
        while not quit_event.is_set():
            task = loop.task
            if task is None:
                await asyncio.sleep(0.05)
                continue
            await asyncio.wait({waiter, task}, return_when=asyncio.FIRST_COMPLETED)
            if task.done() and loop.task is task and not quit_event.is_set():
                break
    finally:
        waiter.cancel()
        await loop.stop()
        for t in list(pending):
            t.cancel()
        cv2.destroyAllWindows()
    if loop.error is not None:
        die(f"render loop stopped: {loop.error}")


def cmd_preview(args: argparse.Namespace) -> None:
    globe = make_globe(args)
    log("keys: n = next scene, g = save gif, v = save webm, q/Esc = quit")
    asyncio.run(_preview(args, globe))


# ============================================================
# Entry
# ============================================================


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="snowglobe", description="Snow globe dioramas: render, preview and export.")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("scenes", help="List available scenes")

    ap_still = sub.add_parser("still", help="Simulate N ticks and save one PNG frame")
    add_scene_args(ap_still)
    ap_still.add_argument("--ticks", type=int, default=180)
    ap_still.add_argument("--out", default=None, help="PNG path (default: magic-globe-<scene>.png)")

    ap_record = sub.add_parser("record", help="Capture a GIF or video of a running scene")
    add_scene_args(ap_record)
    add_capture_args(ap_record)

    ap_preview = sub.add_parser("preview", help="Live OpenCV window")
    add_scene_args(ap_preview)
    ap_preview.add_argument("--out-dir", default=".", help="Directory for captures taken from the preview")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.command == "scenes":
        cmd_scenes(args)
    elif args.command == "still":
        cmd_still(args)
    elif args.command == "record":
        cmd_record(args, argv)
    elif args.command == "preview":
        cmd_preview(args)


if __name__ == "__main__":
    main()
