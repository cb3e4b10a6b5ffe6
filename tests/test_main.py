import argparse
import logging
from unittest.mock import patch

import pytest
from PIL import Image

from icon_factory import assert_white_rgb, red_and_white, transparent_glyph
from monoicon import config
from monoicon.cache import TieredCache
from monoicon.main import configure_logging, main, parse_size


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path, monkeypatch):
    """Send the log file to tmp_path and undo handler setup afterwards."""

    monkeypatch.setenv("MONOICON_LOG_PATH", str(tmp_path / "logs" / "monoicon.log"))
    logger = logging.getLogger(config.LOGGER_NAME)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_configure_logging_is_idempotent(tmp_path):
    logger = configure_logging()
    assert configure_logging() is logger
    assert len(logger.handlers) == 2
    assert (tmp_path / "logs" / "monoicon.log").exists()


def test_parse_size():
    assert parse_size("24x16") == (24, 16)
    assert parse_size("32") == (32, 32)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_size("big")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_size("0x4")


def test_classify_command(tmp_path, capsys):
    colored = tmp_path / "colored.png"
    glyph = tmp_path / "glyph.png"
    red_and_white().save(colored)
    transparent_glyph().save(glyph)

    assert main(["classify", str(colored), str(glyph)]) == 0

    out = capsys.readouterr().out
    assert f"{colored}: colored" in out
    assert f"{glyph}: monochrome" in out


def test_classify_reports_missing_file(tmp_path):
    assert main(["classify", str(tmp_path / "missing.png")]) == 1


def test_convert_command(tmp_path, capsys):
    source = tmp_path / "app.png"
    target = tmp_path / "app_mono.png"
    red_and_white(48).save(source)

    assert main(["--stats", "convert", str(source), str(target), "--size", "24"]) == 0

    with Image.open(target) as result:
        assert result.size == (24, 24)
        assert_white_rgb(result.convert("RGBA"))
    out = capsys.readouterr().out
    assert "converted" in out
    assert "monochrome: 1/100" in out
    assert "fitted: 1/80" in out


def test_each_run_starts_with_empty_caches(tmp_path, capsys):
    source = tmp_path / "app.png"
    red_and_white(48).save(source)

    for name in ("first.png", "second.png"):
        assert main(["--stats", "convert", str(source), str(tmp_path / name)]) == 0
        assert "monochrome: 1/100" in capsys.readouterr().out


def test_convert_failure_returns_error(tmp_path):
    assert main(["convert", str(tmp_path / "nope.png"), str(tmp_path / "out.png")]) == 1


def test_batch_command(tmp_path, capsys):
    inputs = []
    for name in ("a", "b"):
        path = tmp_path / f"{name}.png"
        red_and_white().save(path)
        inputs.append(str(path))
    out_dir = tmp_path / "out"

    assert main(["batch", str(out_dir), *inputs, "--workers", "2"]) == 0

    assert "Processed 2/2 icons" in capsys.readouterr().out
    assert sorted(p.name for p in out_dir.iterdir()) == ["a.png", "b.png"]


def test_batch_runs_under_memory_monitor(tmp_path):
    source = tmp_path / "a.png"
    red_and_white().save(source)

    with patch("monoicon.main.PerformanceMonitor") as monitor_cls:
        assert main(["batch", str(tmp_path / "out"), str(source)]) == 0

    (cache,), _ = monitor_cls.call_args
    assert isinstance(cache, TieredCache)
    monitor_cls.return_value.start.assert_called_once()
    monitor_cls.return_value.stop.assert_called_once()
