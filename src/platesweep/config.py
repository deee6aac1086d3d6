"""YAML assembly descriptions.

A configuration file describes one assembly made of any mix of an
optional propeller guard, outline plates and keyframed sweeps::

    schema_version: "1.0"
    name: bracket
    guard:                      # optional, GuardParams overrides
      propeller_d: 120
    plates:
      - name: bracket
        bottom: 0
        height: 3
        color: [0.2, 0.4, 1.0]
        outlines:
          - rectangle: {x: 0, y: 0, w: 40, h: 20}
          - circle: {x: 0, y: 0, d: 5, div: 32}
          - capsule: {x: 10, y: 0, w: 3, length: 8, angle: 90, div: 16}
          - points: [[-15, -5], [-12, -5], [-12, -2]]
    sweeps:
      - name: handle
        div_count: 8
        rot_div_count: 16
        fill_start: true
        fill_end: true
        scale:    [{at: 0, w: 3, h: 3}]
        rotation: [{at: 0, axis: [1, 0, 0], angle: 90}]
        position: [{at: 0, x: 0, y: 3, z: 0}, {time: 1, x: 0, y: 20, z: 0}]

Angles are in degrees.  Keyframes use either ``at`` (section index) or
``time`` (0 .. 1 along the sweep).
"""

from __future__ import annotations

import logging
import math
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from platesweep.assembly import AssemblyResult, GuardParams, assemble, build_propeller_guard
from platesweep.errors import BuildResult, ConfigError
from platesweep.mesh import GREEN, Color
from platesweep.outline import Plate
from platesweep.plate import build_plate
from platesweep.sweep import Sweep, build_sweep
from platesweep.vecmath import Quaternion

logger = logging.getLogger(__name__)

_TOP_KEYS = {"schema_version", "name", "guard", "plates", "sweeps"}
_PLATE_KEYS = {"name", "bottom", "height", "color", "outlines"}
_SWEEP_KEYS = {"name", "div_count", "rot_div_count", "joint_term", "fill_start",
               "fill_end", "color", "scale", "rotation", "position",
               "rotation_all", "translate_all"}
_OUTLINE_ARGS = {
    "rectangle": ({"x", "y", "w", "h"}, {"angle"}),
    "circle": ({"x", "y", "d", "div"}, set()),
    "capsule": ({"x", "y", "w", "length"}, {"angle", "div"}),
}


def load_config(path) -> Dict[str, Any]:
    """Load and validate an assembly description from a YAML file."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return parse_config(data, source=str(path))


def parse_config(data: Any, source: str = "<config>") -> Dict[str, Any]:
    """Validate an already parsed configuration mapping."""

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config format in {source}: expected mapping at root")

    schema_version = str(data.get("schema_version", "1.0"))
    if not schema_version.startswith("1."):
        raise ConfigError(
            f"Unsupported schema version '{schema_version}' in {source}. "
            f"Expected version 1.x"
        )
    _check_keys(data, _TOP_KEYS, source)
    for key in ("plates", "sweeps"):
        if not isinstance(data.get(key, []), list):
            raise ConfigError(f"{source}: '{key}' must be a list")
    if "guard" in data and not isinstance(data["guard"], (dict, type(None))):
        raise ConfigError(f"{source}: 'guard' must be a mapping")

    data = dict(data)
    data["_source_path"] = source
    return data


def _check_keys(entry: Mapping[str, Any], allowed, where: str) -> None:
    unknown = sorted(set(entry) - set(allowed))
    if unknown:
        raise ConfigError(f"{where}: unknown keys {unknown}")


def _number(entry: Mapping[str, Any], key: str, where: str, default: Optional[float] = None) -> float:
    if key not in entry:
        if default is None:
            raise ConfigError(f"{where}: missing '{key}'")
        return default
    value = entry[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{where}: '{key}' must be a number, got {value!r}")
    return float(value)


def _integer(entry: Mapping[str, Any], key: str, where: str,
             default: Optional[int] = None, minimum: int = 0) -> int:
    if key not in entry:
        if default is None:
            raise ConfigError(f"{where}: missing '{key}'")
        return default
    value = entry[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: '{key}' must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{where}: '{key}' must be at least {minimum}, got {value}")
    return value


def _vector(value: Any, size: int, where: str, what: str) -> Tuple[float, ...]:
    if (not isinstance(value, (list, tuple)) or len(value) != size
            or any(isinstance(c, bool) or not isinstance(c, (int, float)) for c in value)):
        raise ConfigError(f"{where}: {what} must be a list of {size} numbers, got {value!r}")
    return tuple(float(c) for c in value)


def _color(value: Any, where: str) -> Color:
    if value is None:
        return GREEN
    return Color(*_vector(value, 3, where, "color"))


def guard_params(entry: Optional[Mapping[str, Any]]) -> GuardParams:
    entry = entry or {}
    kinds = {f.name: f.type for f in fields(GuardParams)}
    _check_keys(entry, kinds, "guard")
    values: Dict[str, Any] = {}
    for key, value in entry.items():
        kind = kinds[key]
        if key == "color":
            values[key] = _color(value, "guard").as_tuple()
        elif kind == "int":
            values[key] = _integer(entry, key, "guard")
        elif kind == "str":
            if not isinstance(value, str):
                raise ConfigError(f"guard: '{key}' must be a string, got {value!r}")
            values[key] = value
        else:
            values[key] = _number(entry, key, "guard")
    try:
        return GuardParams(**values)
    except ValueError as exc:
        raise ConfigError(f"guard: {exc}") from exc


def plate_from_config(entry: Mapping[str, Any], where: str = "plate") -> Plate:
    _check_keys(entry, _PLATE_KEYS, where)
    outlines = entry.get("outlines") or []
    if not isinstance(outlines, list):
        raise ConfigError(f"{where}: 'outlines' must be a list")
    plate = Plate()
    for i, outline in enumerate(outlines):
        here = f"{where}.outlines[{i}]"
        if not isinstance(outline, dict) or len(outline) != 1:
            raise ConfigError(f"{here}: expected a single-key mapping")
        (kind, args), = outline.items()
        if kind == "points":
            if not isinstance(args, list):
                raise ConfigError(f"{here}: points must be a list of [x, y] pairs")
            plate.add_outline([_vector(p, 2, f"{here}[{j}]", "point")
                               for j, p in enumerate(args)])
            continue
        if kind not in _OUTLINE_ARGS:
            raise ConfigError(f"{here}: unknown outline type '{kind}'")
        if not isinstance(args, dict):
            raise ConfigError(f"{here}: arguments must be a mapping")
        required, optional = _OUTLINE_ARGS[kind]
        _check_keys(args, required | optional, here)
        x = _number(args, "x", here)
        y = _number(args, "y", here)
        angle = math.radians(_number(args, "angle", here, 0.0))
        if kind == "rectangle":
            plate.add_rectangle(x, y, _number(args, "w", here), _number(args, "h", here), angle)
        elif kind == "circle":
            plate.add_circle(x, y, _number(args, "d", here), _integer(args, "div", here, minimum=3))
        else:
            plate.add_capsule(x, y, _number(args, "w", here), _number(args, "length", here),
                              angle, _integer(args, "div", here, 24, minimum=1))
    return plate.extrude(_number(entry, "bottom", where, 0.0),
                         _number(entry, "height", where, 1.0))


def _key_position(sweep: Sweep, key: Mapping[str, Any], where: str) -> float:
    if ("at" in key) == ("time" in key):
        raise ConfigError(f"{where}: give exactly one of 'at' or 'time'")
    if "at" in key:
        return _number(key, "at", where)
    return sweep.time_to_index(_number(key, "time", where))


def _keys(entry: Mapping[str, Any], name: str, where: str) -> List[Mapping[str, Any]]:
    keys = entry.get(name) or []
    if not isinstance(keys, list) or not all(isinstance(k, dict) for k in keys):
        raise ConfigError(f"{where}: '{name}' must be a list of mappings")
    return keys


def sweep_from_config(entry: Mapping[str, Any], where: str = "sweep") -> Sweep:
    _check_keys(entry, _SWEEP_KEYS, where)
    try:
        sweep = Sweep(
            _integer(entry, "div_count", where),
            _integer(entry, "rot_div_count", where, 24),
            joint_term=bool(entry.get("joint_term", False)),
            fill_start=bool(entry.get("fill_start", False)),
            fill_end=bool(entry.get("fill_end", False)),
        )
    except ValueError as exc:
        raise ConfigError(f"{where}: {exc}") from exc

    for i, key in enumerate(_keys(entry, "scale", where)):
        here = f"{where}.scale[{i}]"
        _check_keys(key, {"at", "time", "w", "h"}, here)
        sweep.add_scale(_key_position(sweep, key, here),
                        _number(key, "w", here), _number(key, "h", here))
    for i, key in enumerate(_keys(entry, "rotation", where)):
        here = f"{where}.rotation[{i}]"
        _check_keys(key, {"at", "time", "axis", "angle"}, here)
        sweep.add_rotation(_key_position(sweep, key, here), _rotation(key, here))
    for i, key in enumerate(_keys(entry, "position", where)):
        here = f"{where}.position[{i}]"
        _check_keys(key, {"at", "time", "x", "y", "z"}, here)
        sweep.add_position(_key_position(sweep, key, here), _number(key, "x", here),
                           _number(key, "y", here), _number(key, "z", here))

    if "rotation_all" in entry:
        sweep.rotation_all = _rotation(entry["rotation_all"], f"{where}.rotation_all")
    if "translate_all" in entry:
        sweep.translate_all = _vector(entry["translate_all"], 3, where, "translate_all")
    return sweep


def _rotation(key: Any, where: str) -> Quaternion:
    if not isinstance(key, dict):
        raise ConfigError(f"{where}: rotation must be a mapping with axis and angle")
    axis = _vector(key.get("axis"), 3, where, "axis")
    try:
        return Quaternion.from_axis_angle(axis, math.radians(_number(key, "angle", where)))
    except ValueError as exc:
        raise ConfigError(f"{where}: {exc}") from exc


def build_from_config(config: Mapping[str, Any]) -> AssemblyResult:
    """Build every part named in ``config`` and merge them into one mesh."""

    name = str(config.get("name") or "assembly")
    parts: List[BuildResult] = []
    if "guard" in config:
        parts.extend(build_propeller_guard(guard_params(config["guard"])).parts)
    for i, entry in enumerate(config.get("plates") or []):
        where = f"plates[{i}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where}: expected a mapping")
        plate = plate_from_config(entry, where)
        parts.append(build_plate(plate, str(entry.get("name", f"plate{i}")),
                                 _color(entry.get("color"), where)))
    for i, entry in enumerate(config.get("sweeps") or []):
        where = f"sweeps[{i}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where}: expected a mapping")
        sweep = sweep_from_config(entry, where)
        parts.append(build_sweep(sweep, str(entry.get("name", f"sweep{i}")),
                                 _color(entry.get("color"), where)))
    if not parts:
        logger.warning("config '%s' describes no parts", name)
    return assemble(name, parts)


__all__ = [
    "load_config",
    "parse_config",
    "guard_params",
    "plate_from_config",
    "sweep_from_config",
    "build_from_config",
]
