"""
Exceptions and build diagnostics.

The geometry builders never raise for recoverable input problems.  They
record a :class:`Diagnostic` and keep going, so a single bad outline does
not cost the whole part.  Callers that prefer exceptions can call
:meth:`BuildResult.raise_for_errors`.

Diagnostic codes:
- degenerate-outline: ear clipping had to drop vertices
- partial-solid: side walls were skipped for an outline
- missing-keyframes: a sweep channel had no keyframes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from platesweep.mesh import Mesh


class Severity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


DEGENERATE_OUTLINE = "degenerate-outline"
PARTIAL_SOLID = "partial-solid"
MISSING_KEYFRAMES = "missing-keyframes"


class PlatesweepError(Exception):
    """Base exception for platesweep errors."""
    pass


class DegenerateInputError(PlatesweepError):
    """Ear clipping could not find a valid ear for some vertices."""

    def __init__(self, outline: Optional[int], dropped: Sequence[int]):
        self.outline = outline
        self.dropped = list(dropped)
        where = "polygon" if outline is None else f"outline {outline}"
        super().__init__(
            f"{where}: {len(self.dropped)} vertices could not be clipped "
            f"(ring positions {self.dropped})"
        )


class MissingKeyframesError(PlatesweepError):
    """A keyframe channel was sampled without any keyframes."""

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"no keyframes in '{channel}' channel")


class ConfigError(PlatesweepError):
    """Malformed assembly configuration."""
    pass


class PartialSolidWarning(UserWarning):
    """Side walls were omitted, the solid is not closed."""
    pass


@dataclass
class Diagnostic:
    """A single recoverable problem found during a build."""
    code: str
    message: str
    severity: Severity
    outline: Optional[int] = None
    dropped: List[int] = field(default_factory=list)
    channel: Optional[str] = None

    def format(self) -> str:
        loc = "" if self.outline is None else f"outline {self.outline}: "
        return f"{self.severity.value}[{self.code}]: {loc}{self.message}"

    def exception(self) -> Exception:
        """Rebuild the exception (or warning) this diagnostic stands for."""
        if self.code == DEGENERATE_OUTLINE:
            return DegenerateInputError(self.outline, self.dropped)
        if self.code == MISSING_KEYFRAMES:
            return MissingKeyframesError(self.channel or "")
        if self.code == PARTIAL_SOLID:
            return PartialSolidWarning(self.format())
        return PlatesweepError(self.format())


@dataclass
class BuildResult:
    """A mesh plus the diagnostics collected while building it."""
    mesh: "Mesh"
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def raise_for_errors(self) -> None:
        """Raise the exception for the first error diagnostic, if any."""
        for diag in self.errors:
            raise diag.exception()


__all__ = [
    "Severity",
    "Diagnostic",
    "BuildResult",
    "PlatesweepError",
    "DegenerateInputError",
    "MissingKeyframesError",
    "ConfigError",
    "PartialSolidWarning",
    "DEGENERATE_OUTLINE",
    "PARTIAL_SOLID",
    "MISSING_KEYFRAMES",
]
