#!/usr/bin/env python3
"""
Build an assembly and export it.

Usage:
    python -m platesweep [--config FILE.yaml] [--obj OUT.obj] [--mtl OUT.mtl]
                         [--stl OUT.stl] [--ascii] [-v] [--log-file FILE]

Without ``--config`` the default propeller guard is built.  The exit
status is 1 when any part reported an error diagnostic.

Examples:
    python -m platesweep --stl guard.stl
    python -m platesweep --config examples/bracket.yaml --obj bracket.obj --mtl bracket.mtl
"""

import argparse
import logging
import sys
from pathlib import Path

from platesweep.assembly import build_propeller_guard
from platesweep.config import build_from_config, load_config
from platesweep.errors import ConfigError
from platesweep.io import write_mtl, write_obj, write_stl
from platesweep.logging_config import setup_logging

logger = logging.getLogger("platesweep.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="platesweep",
        description="Build extruded plates and swept tubes and export the mesh.",
    )
    parser.add_argument("--config", type=Path, help="YAML assembly description")
    parser.add_argument("--obj", type=Path, help="write Wavefront OBJ")
    parser.add_argument("--mtl", type=Path, help="write the OBJ material library")
    parser.add_argument("--stl", type=Path, help="write STL (binary unless --ascii)")
    parser.add_argument("--ascii", action="store_true", help="write ASCII STL")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--log-file", help="also log to this file")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        if args.config:
            result = build_from_config(load_config(args.config))
        else:
            result = build_propeller_guard()
    except (ConfigError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 2

    mesh = result.mesh
    if args.obj:
        mtl_name = args.mtl.name if args.mtl else None
        write_obj(mesh, args.obj, mtl_name=mtl_name)
        logger.info("wrote %s", args.obj)
    if args.mtl:
        write_mtl(mesh.materials(), args.mtl)
        logger.info("wrote %s", args.mtl)
    if args.stl:
        write_stl(mesh, args.stl, binary=not args.ascii, name=result.name)
        logger.info("wrote %s", args.stl)

    for diag in result.diagnostics:
        print(diag.format())
    print(f"{result.name}: {mesh.vertex_count} vertices, {mesh.triangle_count} triangles, "
          f"{len(mesh.groups)} groups")
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
