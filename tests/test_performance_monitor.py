from unittest.mock import MagicMock, patch

import pytest

from monoicon.managers.performance import PerformanceMonitor


def _patched_rss(rss):
    mock_psutil = MagicMock()
    mock_psutil.Process.return_value.memory_info.return_value.rss = rss
    mock_psutil.Error = Exception
    return patch("monoicon.managers.performance.psutil", mock_psutil)


def test_high_memory_triggers_cleanup():
    cache = MagicMock()
    monitor = PerformanceMonitor(cache, threshold_bytes=100)
    with _patched_rss(10**12):
        assert monitor.check_memory() is True
    cache.cleanup_all.assert_called_once()


def test_cleanup_is_rate_limited():
    cache = MagicMock()
    monitor = PerformanceMonitor(cache, threshold_bytes=100, cleanup_interval=300)
    with _patched_rss(10**12):
        assert monitor.check_memory() is True
        assert monitor.check_memory() is False
    cache.cleanup_all.assert_called_once()


def test_low_memory_is_ignored():
    cache = MagicMock()
    monitor = PerformanceMonitor(cache, threshold_bytes=10**12)
    with _patched_rss(100):
        assert monitor.check_memory() is False
    cache.cleanup_all.assert_not_called()


def test_failed_memory_read_is_logged(caplog):
    cache = MagicMock()
    monitor = PerformanceMonitor(cache, threshold_bytes=100)
    with _patched_rss(0) as mock_psutil:
        mock_psutil.Process.side_effect = RuntimeError("no proc")
        assert monitor.check_memory() is False
    assert "Memory check failed" in caplog.text
    cache.cleanup_all.assert_not_called()


def test_monitor_requires_a_cache():
    with pytest.raises(TypeError):
        PerformanceMonitor(threshold_bytes=100)


def test_start_and_stop():
    monitor = PerformanceMonitor(MagicMock(), check_interval=3600)
    monitor.start()
    assert monitor._timer is not None
    assert monitor._timer.daemon is True
    monitor.stop()
    assert monitor._timer is None
