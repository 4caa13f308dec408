#!/usr/bin/env python3
"""sonar-draw: render an NPZ archive of polar sonar frames to fan images.

Examples:
    sonar-draw scan.npz --out frames/ --overlay
    sonar-draw scan.npz --video scan.mp4 --colormap viridis --fov-deg 130
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

import cv2
import numpy as np
from tqdm import tqdm

from .colormaps import get_colormap
from .config import DrawConfig
from .data_loading import iter_pings, load_polar_npz
from .drawer import SonarDrawer
from .profiler import Profiler


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sonar-draw", description=__doc__.splitlines()[0])
    ap.add_argument("npz", type=Path, help="NPZ archive with raw_polar frames")
    ap.add_argument("--out", type=Path, default=None, help="Directory for PNG frames")
    ap.add_argument("--video", type=Path, default=None, help="Write an MP4 video instead of/as well as PNGs")
    ap.add_argument("--fps", type=float, default=15.0, help="Video framerate")
    ap.add_argument("--colormap", default="inferno", help="gray, inferno or any matplotlib colormap")
    ap.add_argument("--overlay", action="store_true", help="Draw range rings and bearing lines")
    ap.add_argument("--rmin", type=float, default=None, help="Minimum range in meters (default: metadata)")
    ap.add_argument("--rmax", type=float, default=None, help="Maximum range in meters (default: metadata)")
    ap.add_argument("--fov-deg", type=float, default=None, help="Field of view in degrees (default: metadata)")
    ap.add_argument("--db-norm", type=float, default=60.0, help="dB span for float (linear power) frames")
    ap.add_argument("--start", type=int, default=0, help="First frame")
    ap.add_argument("--count", type=int, default=None, help="Number of frames (default: all)")
    ap.add_argument("--step", type=int, default=1, help="Render every Nth frame")
    ap.add_argument("--profile", action="store_true", help="Print per-stage timings")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv=None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.npz.exists():
        ap.error(f"input not found: {args.npz}")
    if args.out is None and args.video is None:
        ap.error("nothing to do: give --out and/or --video")

    try:
        colormap = get_colormap(args.colormap)
    except ValueError as exc:
        ap.error(str(exc))

    archive = load_polar_npz(args.npz)
    range_bounds = archive.range_bounds()
    if args.rmin is not None or args.rmax is not None:
        range_bounds = (args.rmin if args.rmin is not None else range_bounds[0],
                        args.rmax if args.rmax is not None else range_bounds[1])
    azimuth_bounds = None
    if args.fov_deg is not None:
        half_fov = float(np.deg2rad(0.5 * args.fov_deg))
        azimuth_bounds = (-half_fov, half_fov)

    profiler = Profiler() if args.profile else None
    drawer = SonarDrawer(replace(DrawConfig(), colormap=colormap, add_overlay=args.overlay), profiler)

    if args.out is not None:
        args.out.mkdir(parents=True, exist_ok=True)

    print(f"\nRendering {args.npz.name}: {len(archive)} frames")
    print(f"  Range: {range_bounds[0]}-{range_bounds[1]}m | Colormap: {args.colormap}")

    writer = None
    wrote = 0
    pings = iter_pings(archive, range_bounds, azimuth_bounds, args.db_norm,
                       start=args.start, count=args.count, step=args.step)
    try:
        for idx, ping in tqdm(pings, desc="Drawing"):
            fan = drawer.draw_sonar(ping)
            if fan.size == 0:
                continue
            bgr = cv2.cvtColor(fan, cv2.COLOR_RGB2BGR)

            if args.out is not None:
                cv2.imwrite(str(args.out / f"frame_{idx:06d}.png"), bgr)

            if args.video is not None:
                if writer is None:
                    frame_h, frame_w = bgr.shape[:2]
                    writer = cv2.VideoWriter(str(args.video), cv2.VideoWriter_fourcc(*'mp4v'),
                                             args.fps, (frame_w, frame_h), True)
                    if not writer.isOpened():
                        raise RuntimeError(f"Could not open video writer: {args.video}")
                writer.write(bgr)
            wrote += 1
    finally:
        if writer is not None:
            writer.release()

    print(f"✓ Rendered {wrote} frames (remap tables built {drawer.cache.rebuild_count}x)")
    if profiler is not None:
        print(profiler.report())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
