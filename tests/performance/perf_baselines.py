"""Performance baselines for the monochrome pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class PerfBaseline:
    """Configuration for a performance benchmark assertion."""

    loops: int
    max_ms_per_call: float
    reference_ms_per_call: float


PERF_BASELINES: Final[dict[str, PerfBaseline]] = {
    "detect_color_saturation": PerfBaseline(
        loops=200,
        max_ms_per_call=5.0,
        reference_ms_per_call=0.05,
    ),
    "ensure_monochrome_opaque_48": PerfBaseline(
        loops=20,
        max_ms_per_call=250.0,
        reference_ms_per_call=6.0,
    ),
    "cached_synthesis": PerfBaseline(
        loops=500,
        max_ms_per_call=5.0,
        reference_ms_per_call=0.02,
    ),
}
