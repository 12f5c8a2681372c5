"""Command line entry point: ``python -m quadvox``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from quadvox import __version__
from quadvox.config import CONFIG_FILENAME, ViewerConfig, load_config
from quadvox.geom import vstr
from quadvox.mesh import shared_cube
from quadvox.raycast import cast_mesh, ray_through
from quadvox.visibility import classify_facing, facing_away, facing_toward
from quadvox.voxel import FACE_NAMES, TRIANGLES_PER_FACE, Voxel
from quadvox.xform import Translation

logger = logging.getLogger("quadvox")


def _add_scene_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help=f"YAML settings file (default: ./{CONFIG_FILENAME} if present).")
    parser.add_argument("--side", type=float, help="Voxel edge length.")
    parser.add_argument("--position", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Voxel centre.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quadvox", description="Voxel geometry, visibility and ray casting.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output.")
    sub = parser.add_subparsers(dest="command", required=True)

    view = sub.add_parser("view", help="Open an interactive window with a spinning voxel.")
    _add_scene_args(view)
    view.add_argument("--normal-visualization", action="store_true", default=None,
                      help="Color by the normal_point buffer instead of lighting.")

    edges = sub.add_parser("edges", help="Print facing, away and silhouette vertex sets.")
    _add_scene_args(edges)
    edges.add_argument("--viewpoint", type=float, nargs=3, default=[0.0, 0.0, 0.0], metavar=("X", "Y", "Z"))
    edges.add_argument("--shared", action="store_true",
                       help="Use an 8-vertex shared-corner cube instead of the 24-vertex voxel.")

    pick = sub.add_parser("pick", help="Cast a ray at the voxel and report the nearest hit.")
    _add_scene_args(pick)
    pick.add_argument("--origin", type=float, nargs=3, default=[0.0, 0.0, 0.0], metavar=("X", "Y", "Z"))
    pick.add_argument("--target", type=float, nargs=3, required=True, metavar=("X", "Y", "Z"))
    return parser


def _settings(args: argparse.Namespace) -> ViewerConfig:
    path = args.config
    if path is None and Path(CONFIG_FILENAME).is_file():
        path = Path(CONFIG_FILENAME)
    config = load_config(path)
    return config.merged(
        side_length=args.side,
        position=args.position,
        normal_visualization=getattr(args, "normal_visualization", None),
    )


def _fmt(indices) -> str:
    return "[" + ", ".join(str(i) for i in sorted(indices)) + "]"


def cmd_edges(args: argparse.Namespace, config: ViewerConfig) -> int:
    if args.shared:
        mesh = shared_cube(config.side_length, Translation(config.position))
    else:
        mesh = Voxel(config.side_length, config.position).mesh()
    toward = classify_facing(facing_toward, args.viewpoint, mesh.positions, mesh.indices, mesh.transform)
    away = classify_facing(facing_away, args.viewpoint, mesh.positions, mesh.indices, mesh.transform)
    print(f"facing: {_fmt(toward)}")
    print(f"away: {_fmt(away)}")
    print(f"edges: {_fmt(toward & away)}")
    return 0


def cmd_pick(args: argparse.Namespace, config: ViewerConfig) -> int:
    voxel = Voxel(config.side_length, config.position)
    ray = ray_through(args.origin, args.target)
    found = cast_mesh(ray, voxel.vertices, voxel.indices, voxel.transform, origin=args.origin)
    if found is None:
        print("no hit")
        return 1
    triangle, hit = found
    face = FACE_NAMES[triangle // TRIANGLES_PER_FACE]
    print(f"hit triangle {triangle} ({face} face) at {vstr(hit.point)}, t={hit.t:g}")
    return 0


def cmd_view(args: argparse.Namespace, config: ViewerConfig) -> int:
    # pyglet wants a display as soon as it is imported
    from quadvox.pyglet_drawable import run_viewer

    run_viewer(config)
    return 0


COMMANDS = {
    "edges": cmd_edges,
    "pick": cmd_pick,
    "view": cmd_view,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = _settings(args)
    except (OSError, ValueError) as exc:
        print(f"quadvox: {exc}", file=sys.stderr)
        return 2
    logger.debug("settings: %s", config)
    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
