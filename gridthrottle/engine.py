"""gridthrottle - run pipeline.

Connects window resolution, market data, and frequency scaling into one
linear pass: resolve window -> fetch prices -> classify -> write ceilings.
"""

import logging
from datetime import datetime
from typing import Optional

from gridthrottle.config import Config
from gridthrottle.market.models import DayAheadIndexRecord, FetchResult, PriceRecord
from gridthrottle.market.ote_client import OteClient
from gridthrottle.pricing import fetch_price_series
from gridthrottle.scaling.cpufreq import CpuFreqStore
from gridthrottle.scaling.scaler import ScalingOutcome, TrendScaler
from gridthrottle.timewindow import TimeWindow, resolve_time_window

logger = logging.getLogger("gridthrottle")


class ThrottleEngine:
    """Runs one evaluation-and-scaling pass per call.

    Args:
        config: Application configuration.
        client: An ``OteClient`` (or compatible duck-type / mock).
        store: A ``CpuFreqStore`` (or compatible duck-type / mock).
        dry_run: Decide without writing to the control files.
    """

    def __init__(
        self,
        config: Config,
        client: OteClient,
        store: CpuFreqStore,
        dry_run: bool = False,
    ) -> None:
        self._config = config
        self._client = client
        self._scaler = TrendScaler(store, config.cpu_count, dry_run=dry_run)

    def resolve_window(self, now: Optional[datetime] = None) -> TimeWindow:
        """Window for this run; raises ``TimeZoneError`` on a bad zone."""
        window = resolve_time_window(self._config.lookback, self._config.timezone, now=now)
        logger.info(
            "Window %s %02d:00 -> %s %02d:00 (%s)",
            window.start_date_str, window.start_hour,
            window.end_date_str, window.end_hour,
            self._config.timezone,
        )
        return window

    def run(self, now: Optional[datetime] = None) -> ScalingOutcome:
        """Fetch the recent intraday prices and scale the CPUs accordingly."""
        window = self.resolve_window(now)
        prices = fetch_price_series(self._client, window)
        return self._scaler.scale(prices)

    def report(
        self,
        now: Optional[datetime] = None,
    ) -> tuple[FetchResult[PriceRecord], FetchResult[DayAheadIndexRecord]]:
        """Log day-ahead prices and the day-ahead index for the window's dates."""
        window = self.resolve_window(now)

        logger.info("------- GetDamPriceE day-ahead prices -------")
        prices = self._client.fetch_day_ahead_prices(
            window.start_date_str, window.end_date_str,
        )
        logger.info("------- GetDamIndexE day-ahead index -------")
        index = self._client.fetch_day_ahead_index(
            window.start_date_str, window.end_date_str,
        )
        return prices, index
