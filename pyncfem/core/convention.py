# pyncfem/core/convention.py
import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name}={raw!r} is not a number.") from None


@dataclass
class GeometryConvention:
    """
    Tolerances used when deriving shape functions from cell geometry.
    """
    # A cell is degenerate when |sin| of the angle between its two midlines
    # is at or below this value.
    degeneracy_rtol: float = 1e-12
    # Cells that pass the degeneracy test but fall below this value are
    # reported through the logger.
    warn_rtol: float = 1e-8
    # Absolute tolerance for coordinate comparisons (point on edge, etc.).
    point_tol: float = 1e-12

    def is_degenerate(self, sine: float, rtol: float = None) -> bool:
        """Checks a midline-angle sine against the degeneracy threshold."""
        if rtol is None:
            rtol = self.degeneracy_rtol
        return abs(sine) <= rtol

    def is_nearly_degenerate(self, sine: float) -> bool:
        return abs(sine) <= self.warn_rtol

    @classmethod
    def from_env(cls) -> "GeometryConvention":
        """Defaults overridden by ``PYNCFEM_*`` environment variables."""
        base = cls()
        return cls(
            degeneracy_rtol=_env_float("PYNCFEM_DEGENERACY_RTOL", base.degeneracy_rtol),
            warn_rtol=_env_float("PYNCFEM_WARN_RTOL", base.warn_rtol),
            point_tol=_env_float("PYNCFEM_POINT_TOL", base.point_tol),
        )


# Global, editable in one place:
GEOM = GeometryConvention.from_env()
