#!/usr/bin/env python3
"""
camfrustum Main Entry Point

Load a camera config, place the camera at a pose and report which query
points fall inside its view frustum.

Usage:
    camfrustum --config camera.yaml --pose 0 0 0 0 0 0 1 --point 5 0 0
    camfrustum --preset wide-90 --points cloud.npy --output mask.npy
"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import List, Optional

import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from main.config import CameraModelConfig, PRESET_CONFIGS, get_preset_config
from misc.utils.logging_config import get_logger, setup_logging
from shared.geometry.transforms import pose_from_config
from shared.utils.error_handling import CamFrustumError

console = Console()
logger = get_logger("cli")


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        description="camfrustum: camera visibility frustum queries",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", type=str,
                        help="Camera config file (.yaml, .yml or .json)")
    source.add_argument("--preset", type=str, choices=sorted(PRESET_CONFIGS),
                        help="Built-in camera preset")

    parser.add_argument("--pose", type=float, nargs="+", default=[],
                        help="Pose as x y z qx qy qz qw or x y z rx ry rz (identity if omitted)")
    parser.add_argument("--body-pose", action="store_true",
                        help="Interpret --pose as the body pose instead of the camera pose")

    parser.add_argument("--point", type=float, nargs=3, action="append", default=[],
                        metavar=("X", "Y", "Z"), help="Query point (repeatable)")
    parser.add_argument("--points", type=str, default=None,
                        help="File with (N, 3) query points (.npy or whitespace separated text)")
    parser.add_argument("--no-aabb", action="store_true",
                        help="Skip the AABB pre-filter for file queries")
    parser.add_argument("--output", type=str, default=None,
                        help="Save the boolean visibility mask to this .npy file")

    parser.add_argument("--log-level", type=str, default=None,
                        help="Override the config log level")
    parser.add_argument("--debug", action="store_true",
                        help="Print tracebacks on error")
    return parser


def load_points(path: Path) -> np.ndarray:
    """Read an (N, 3) point array from .npy or text"""
    if not path.exists():
        raise FileNotFoundError(f"Required points file not found: {path}")
    if path.suffix == ".npy":
        points = np.load(path)
    else:
        points = np.loadtxt(path, ndmin=2)
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Points must have shape (N, 3), got {points.shape}")
    return points


def print_frustum(config: CameraModelConfig, model) -> None:
    aabb_min, aabb_max = model.get_aabb()
    pose = model.get_camera_pose()
    text = f"""
[bold]Camera:[/bold] {config.name}
• Position: {np.array2string(pose[:3, 3], precision=4)}
• AABB min: {np.array2string(aabb_min, precision=4)}
• AABB max: {np.array2string(aabb_max, precision=4)}
"""
    console.print(Panel(text, title="camfrustum", border_style="cyan"))


def print_point_table(points: np.ndarray, mask: np.ndarray) -> None:
    table = Table(title="Point visibility")
    table.add_column("#", justify="right")
    table.add_column("x")
    table.add_column("y")
    table.add_column("z")
    table.add_column("in view")
    for i, (point, inside) in enumerate(zip(points, mask)):
        verdict = "[green]yes[/green]" if inside else "[red]no[/red]"
        table.add_row(str(i), *(f"{v:.4f}" for v in point), verdict)
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        if args.config is not None:
            config = CameraModelConfig.load(args.config)
        else:
            config = get_preset_config(args.preset)

        setup_logging(args.log_level or config.log_level)
        logger.info("Loaded camera config '%s'", config.name)

        model = config.build_camera_model()
        pose = pose_from_config(args.pose)
        if args.body_pose:
            model.set_body_pose(pose)
        else:
            model.set_camera_pose(pose)

        print_frustum(config, model)

        single_points = np.asarray(args.point, dtype=np.float64).reshape(-1, 3)
        if len(single_points):
            mask = np.array([model.is_point_in_view(p) for p in single_points], dtype=bool)
            print_point_table(single_points, mask)

        file_mask = None
        if args.points is not None:
            file_points = load_points(Path(args.points))
            file_mask = model.points_in_view(file_points, use_aabb=not args.no_aabb)
            logger.info("%d/%d points from %s in view", int(file_mask.sum()), len(file_mask), args.points)
            console.print(f"✅ {int(file_mask.sum())}/{len(file_mask)} points in view", style="green")

        if args.output is not None:
            if file_mask is None:
                file_mask = mask if len(single_points) else np.zeros(0, dtype=bool)
            np.save(args.output, file_mask)
            console.print(f"💾 Mask saved to {args.output}", style="dim cyan")

        return 0

    except (CamFrustumError, ValueError, FileNotFoundError) as e:
        console.print(f"❌ Error: {e}", style="red")
        if args.debug:
            console.print(traceback.format_exc(), style="red")
        return 1


if __name__ == "__main__":
    sys.exit(main())
