"""Access to the cpufreq control files under sysfs.

Reads the discrete set of frequencies a core supports and writes the
per-core scaling ceiling.  All paths come from :func:`cpufreq_path`.
"""

import logging
import os
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger("gridthrottle.scaling")

AVAILABLE_FREQUENCIES = "scaling_available_frequencies"
SCALING_MAX_FREQ = "scaling_max_freq"


class FrequencyDiscoveryError(RuntimeError):
    """Raised when no usable frequency is reported by the capability file."""


@dataclass(frozen=True)
class FrequencyRange:
    """Lowest and highest supported frequency, in the units sysfs reports."""

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"min {self.min} exceeds max {self.max}")


def cpufreq_path(root: str, cpu: int, name: str) -> str:
    """Return ``<root>/cpu<N>/cpufreq/<name>``."""
    return os.path.join(root, f"cpu{cpu}", "cpufreq", name)


def frequency_range(entries: Iterable[str]) -> FrequencyRange:
    """Reduce capability entries to their min and max.

    Entries that are not integers are skipped.

    Raises:
        FrequencyDiscoveryError: If no entry parses.
    """
    frequencies = []
    for entry in entries:
        try:
            frequencies.append(int(entry))
        except ValueError:
            continue
    if not frequencies:
        raise FrequencyDiscoveryError("no available CPU frequencies reported")
    return FrequencyRange(min=min(frequencies), max=max(frequencies))


class CpuFreqStore:
    """Reads and writes cpufreq files below *root* (normally ``/sys/devices/system/cpu``)."""

    def __init__(self, root: str) -> None:
        self._root = root

    @property
    def root(self) -> str:
        return self._root

    def available_frequencies_path(self) -> str:
        return cpufreq_path(self._root, 0, AVAILABLE_FREQUENCIES)

    def max_freq_path(self, cpu: int) -> str:
        return cpufreq_path(self._root, cpu, SCALING_MAX_FREQ)

    def read_available_frequencies(self) -> list[str]:
        """Return the whitespace-separated entries of cpu0's capability file.

        An unreadable file yields an empty list.  Undecodable bytes become
        non-numeric entries, which :func:`frequency_range` skips.
        """
        path = self.available_frequencies_path()
        try:
            with open(path, "r", encoding="ascii", errors="replace") as f:
                content = f.read()
        except FileNotFoundError:
            logger.error("Path %s does not exist", path)
            return []
        except OSError as exc:
            logger.error("Failed to open path %s: %s", path, exc)
            return []
        return content.split()

    def write_max_frequency(self, cpu: int, frequency: int) -> None:
        """Write *frequency* as the scaling ceiling of core *cpu*.

        Raises:
            OSError: If the control file cannot be written.
        """
        path = self.max_freq_path(cpu)
        with open(path, "w", encoding="ascii") as f:
            f.write(str(frequency))
