"""Trend-based frequency scaling.

Rising prices cap every core but the last at the lowest supported
frequency; anything else lifts the cap to the highest one.  The last core
is never touched.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from gridthrottle.scaling.cpufreq import CpuFreqStore, FrequencyDiscoveryError, frequency_range
from gridthrottle.scaling.trend import TrendState, classify_trend

logger = logging.getLogger("gridthrottle.scaling")


@dataclass
class ScalingOutcome:
    """What one scaling pass decided and did."""

    trend: Optional[TrendState] = None
    target: Optional[int] = None
    written: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped_reason: str = ""

    @property
    def applied(self) -> bool:
        return bool(self.written)


class TrendScaler:
    """Applies a frequency ceiling derived from a price series.

    Args:
        store: A ``CpuFreqStore`` (or compatible duck-type).
        cpu_count: Number of cores on the host.
        dry_run: Decide and log, but write nothing.
    """

    def __init__(self, store: CpuFreqStore, cpu_count: int, dry_run: bool = False) -> None:
        self._store = store
        self._cpu_count = cpu_count
        self._dry_run = dry_run

    def target_cores(self) -> range:
        """Core indices ``0 .. cpu_count-2``."""
        return range(max(self._cpu_count - 1, 0))

    def scale(self, prices: Sequence[float]) -> ScalingOutcome:
        """Classify *prices* and write the matching ceiling to each core.

        A series with fewer than two prices has no hour-over-hour delta, so
        a window holding a single record (or none) never scales.
        """
        if len(prices) < 2:
            logger.warning(
                "Only %d price(s) available, no trend to act on. Not scaling.",
                len(prices),
            )
            return ScalingOutcome(skipped_reason="insufficient prices")

        trend = classify_trend(prices)
        outcome = ScalingOutcome(trend=trend)

        try:
            freq_range = frequency_range(self._store.read_available_frequencies())
        except FrequencyDiscoveryError as exc:
            logger.error("%s. Not scaling.", exc)
            outcome.skipped_reason = "no available frequencies"
            return outcome

        if trend.direction == "increasing":
            logger.info(
                "Prices are increasing (%d up, %d down)", trend.increases, trend.decreases,
            )
            outcome.target = freq_range.min
        else:
            logger.info(
                "Prices are decreasing (%d up, %d down)", trend.increases, trend.decreases,
            )
            outcome.target = freq_range.max

        cores = self.target_cores()
        if not cores:
            logger.info("No cores to scale on a %d-core host", self._cpu_count)
        elif self._dry_run:
            logger.info("Dry run: would scale cpu0-cpu%d to frequency %d",
                        cores[-1], outcome.target)
        if self._dry_run:
            outcome.skipped_reason = "dry run"
            return outcome

        for cpu in cores:
            try:
                self._store.write_max_frequency(cpu, outcome.target)
            except OSError as exc:
                logger.error(
                    "Not scaling cpu%d to frequency %d: %s", cpu, outcome.target, exc,
                )
                outcome.failed.append(cpu)
            else:
                logger.info("Scaling cpu%d to frequency %d", cpu, outcome.target)
                outcome.written.append(cpu)

        return outcome
