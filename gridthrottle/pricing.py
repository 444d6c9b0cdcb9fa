"""Price fetch orchestration - turn a time window into one price series.

A window that crosses midnight is queried as two single-day intraday
requests: the tail of the earlier day (``start_hour`` to 24) and the head
of the later day (0 to ``end_hour``), concatenated earlier day first.
"""

import logging

from gridthrottle.timewindow import TimeWindow

logger = logging.getLogger("gridthrottle.pricing")

END_OF_DAY_HOUR = 24


def fetch_price_series(client, window: TimeWindow) -> list[float]:
    """Fetch intraday prices covering *window*, oldest first.

    Args:
        client: An ``OteClient`` (or duck-typed replacement).
        window: The lookback window to cover.

    Returns:
        The prices in chronological order.  If the earlier half of a
        split window fails the later half is returned alone; if the later
        half (or a single-day fetch) fails the result is empty.
    """
    logger.info("------- GetImPriceE intraday prices for %s -------", window)

    if not window.spans_two_days:
        result = client.fetch_intraday_prices(
            window.start_date_str, window.end_date_str,
            window.start_hour, window.end_hour,
        )
        if not result.ok:
            logger.error("Error getting prices from today (%s), exiting.", result.error.kind)
            return []
        return [rec.price for rec in result.records]

    earlier = client.fetch_intraday_prices(
        window.start_date_str, window.start_date_str,
        window.start_hour, END_OF_DAY_HOUR,
    )
    if not earlier.ok:
        logger.info(
            "Error getting prices from previous day (%s), continuing on second.",
            earlier.error.kind,
        )

    later = client.fetch_intraday_prices(
        window.end_date_str, window.end_date_str,
        0, window.end_hour,
    )
    if not later.ok:
        logger.error("Error getting prices from this day (%s), exiting.", later.error.kind)
        return []

    return [rec.price for rec in earlier.records] + [rec.price for rec in later.records]
