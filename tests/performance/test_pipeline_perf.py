import json
import timeit
from pathlib import Path
from typing import Final

from PIL import Image, ImageDraw

from monoicon.cache import TieredCache
from monoicon.engine import ensure_monochrome
from monoicon.identity import ResourceRef
from monoicon.service import IconService
from pixelops.sampling import detect_color_saturation

from .perf_baselines import PERF_BASELINES

RESULTS_FILENAME: Final[str] = "pipeline_perf_metrics.json"


def _icon(size: int = 48) -> Image.Image:
    img = Image.new("RGBA", (size, size), (30, 110, 220, 255))
    ImageDraw.Draw(img).ellipse((size // 4, size // 4, 3 * size // 4, 3 * size // 4), fill=(255, 255, 255, 255))
    return img


def _record_metric(directory: Path, name: str, value_ms: float) -> None:
    metrics_path = directory / RESULTS_FILENAME
    metrics = {}
    if metrics_path.exists():
        metrics = json.loads(metrics_path.read_text(encoding="utf-8"))
    metrics[name] = value_ms
    metrics_path.write_text(json.dumps(metrics, indent=2), encoding="utf-8")


def _assert_perf(name: str, fn) -> float:
    baseline = PERF_BASELINES[name]
    duration = timeit.timeit(fn, number=baseline.loops)
    per_call_ms = duration / baseline.loops * 1e3
    assert (
        per_call_ms <= baseline.max_ms_per_call
    ), f"{name} took {per_call_ms:.3f}ms per call, expected ≤ {baseline.max_ms_per_call:.2f}ms"
    return per_call_ms


def test_detect_color_saturation_perf(tmp_path):
    icon = _icon()
    per_call = _assert_perf("detect_color_saturation", lambda: detect_color_saturation(icon))
    _record_metric(tmp_path, "detect_color_saturation", per_call)


def test_ensure_monochrome_perf(tmp_path):
    icon = _icon()
    per_call = _assert_perf("ensure_monochrome_opaque_48", lambda: ensure_monochrome(icon))
    _record_metric(tmp_path, "ensure_monochrome_opaque_48", per_call)


def test_cached_synthesis_perf(tmp_path):
    service = IconService(TieredCache())
    icon = _icon()
    ref = ResourceRef("android", 1)
    service.synthesize_monochrome(ref, icon)
    per_call = _assert_perf("cached_synthesis", lambda: service.synthesize_monochrome(ref, icon))
    assert service.compute_count == 1
    _record_metric(tmp_path, "cached_synthesis", per_call)
