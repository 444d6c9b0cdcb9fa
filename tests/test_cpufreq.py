"""Tests for gridthrottle.scaling.cpufreq - sysfs control-file access."""

import pytest

from gridthrottle.scaling.cpufreq import (
    CpuFreqStore,
    FrequencyDiscoveryError,
    FrequencyRange,
    cpufreq_path,
    frequency_range,
)


class TestFrequencyRange:
    def test_min_and_max(self):
        assert frequency_range(["800000", "1200000", "1600000"]) == FrequencyRange(800000, 1600000)

    def test_unparsable_entries_skipped(self):
        assert frequency_range(["", "abc", "1200000", "800000"]) == FrequencyRange(800000, 1200000)

    def test_single_entry(self):
        assert frequency_range(["1000000"]) == FrequencyRange(1000000, 1000000)

    @pytest.mark.parametrize("entries", [[], ["", "n/a"]])
    def test_empty_set_raises(self, entries):
        with pytest.raises(FrequencyDiscoveryError):
            frequency_range(entries)

    def test_inverted_range_rejected(self):
        with pytest.raises(ValueError):
            FrequencyRange(min=2, max=1)


class TestCpuFreqStore:
    def test_paths(self):
        store = CpuFreqStore("/sys/devices/system/cpu")
        assert store.available_frequencies_path() == (
            "/sys/devices/system/cpu/cpu0/cpufreq/scaling_available_frequencies"
        )
        assert store.max_freq_path(3) == "/sys/devices/system/cpu/cpu3/cpufreq/scaling_max_freq"
        assert cpufreq_path("/r", 7, "x") == "/r/cpu7/cpufreq/x"

    def test_read_available(self, cpufreq_root):
        store = CpuFreqStore(str(cpufreq_root))
        assert store.read_available_frequencies() == ["800000", "1200000", "1600000"]

    def test_read_newline_separated(self, cpufreq_root):
        (cpufreq_root / "cpu0" / "cpufreq" / "scaling_available_frequencies").write_text(
            "800000\n1600000\n"
        )
        store = CpuFreqStore(str(cpufreq_root))
        assert store.read_available_frequencies() == ["800000", "1600000"]

    def test_non_ascii_bytes_are_skipped(self, cpufreq_root):
        (cpufreq_root / "cpu0" / "cpufreq" / "scaling_available_frequencies").write_bytes(
            b"800000 \xff 1600000\n"
        )
        entries = CpuFreqStore(str(cpufreq_root)).read_available_frequencies()
        assert len(entries) == 3
        assert frequency_range(entries) == FrequencyRange(800000, 1600000)

    def test_missing_file_is_empty(self, tmp_path, caplog):
        store = CpuFreqStore(str(tmp_path))
        with caplog.at_level("ERROR", logger="gridthrottle.scaling"):
            assert store.read_available_frequencies() == []
        assert "does not exist" in caplog.text

    def test_write_max_frequency(self, cpufreq_root):
        store = CpuFreqStore(str(cpufreq_root))
        store.write_max_frequency(2, 800000)
        assert (cpufreq_root / "cpu2" / "cpufreq" / "scaling_max_freq").read_text() == "800000"

    def test_write_missing_core_raises(self, cpufreq_root):
        store = CpuFreqStore(str(cpufreq_root))
        with pytest.raises(OSError):
            store.write_max_frequency(9, 800000)
