"""Shared fixtures: a fake sysfs cpufreq tree."""

import pytest


@pytest.fixture
def cpufreq_root(tmp_path):
    """Build ``cpu0..cpu3/cpufreq`` with a capability file on cpu0."""
    root = tmp_path / "cpu"
    for cpu in range(4):
        d = root / f"cpu{cpu}" / "cpufreq"
        d.mkdir(parents=True)
        (d / "scaling_max_freq").write_text("1600000\n")
    (root / "cpu0" / "cpufreq" / "scaling_available_frequencies").write_text(
        "800000 1200000 1600000 \n"
    )
    return root
