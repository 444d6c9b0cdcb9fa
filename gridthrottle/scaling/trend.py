"""Trend detection - majority vote over hour-over-hour price deltas."""

from dataclasses import dataclass
from typing import Literal, Sequence


@dataclass(frozen=True)
class TrendState:
    """Direction of a price series and the vote that produced it."""

    direction: Literal["increasing", "decreasing"]
    increases: int
    decreases: int


def classify_trend(prices: Sequence[float]) -> TrendState:
    """Classify *prices* (oldest first) as increasing or decreasing.

    Rules:
        - A step where the later price is ``<=`` the earlier one counts as
          a decrease, otherwise as an increase.
        - **Increasing** only when increases strictly outnumber decreases.
        - **Decreasing** everything else, ties and flat series included.
    """
    increases = 0
    decreases = 0
    for earlier, later in zip(prices, prices[1:]):
        if later <= earlier:
            decreases += 1
        else:
            increases += 1

    direction = "increasing" if increases > decreases else "decreasing"
    return TrendState(direction=direction, increases=increases, decreases=decreases)
