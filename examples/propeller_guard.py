"""Propeller guard for a small brushless motor.

Builds the guard with a few overridden dimensions and writes OBJ/MTL and
STL files next to each other.

Usage::

    python examples/propeller_guard.py --propeller-d 76 --output-dir build/guard
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from platesweep.assembly import ARM_ELBOWS, GuardParams, build_propeller_guard
from platesweep.geometry_checks import degenerate_faces
from platesweep.io import write_mtl, write_obj, write_stl
from platesweep.logging_config import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Build a propeller guard mesh")
    parser.add_argument("--propeller-d", type=float, default=135.0,
                        help="Propeller diameter in mm (default: 135)")
    parser.add_argument("--pillars", type=int, default=8, help="Number of ring pillars (default: 8)")
    parser.add_argument("--arms", type=int, default=4, help="Number of arms (default: 4)")
    parser.add_argument("--elbow", choices=ARM_ELBOWS, default="base",
                        help="Where the arm turns upward (default: base)")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("build/propeller_guard"),
        help="Directory for the exported files (default: build/propeller_guard)",
    )
    args = parser.parse_args()
    setup_logging(logging.INFO)

    params = GuardParams(propeller_d=args.propeller_d, pillar_n=args.pillars,
                         arm_n=args.arms, arm_elbow=args.elbow)
    result = build_propeller_guard(params)
    for diag in result.diagnostics:
        print(diag.format())

    out = args.output_dir
    out.mkdir(parents=True, exist_ok=True)
    write_obj(result.mesh, out / "guard.obj", mtl_name="guard.mtl")
    write_mtl(result.mesh.materials(), out / "guard.mtl")
    write_stl(result.mesh, out / "guard.stl", name="propeller_guard")

    flat = degenerate_faces(result.mesh)
    print(f"{result.mesh.triangle_count} triangles ({len(flat)} degenerate) written to {out}")


if __name__ == "__main__":
    main()
