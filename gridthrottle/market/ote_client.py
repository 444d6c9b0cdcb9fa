"""OTE public data service SOAP client.

Handles all communication with the market operator: day-ahead prices,
the day-ahead index, and intraday prices.  Every operation returns a
``FetchResult``; failures are logged and reported, never raised, and
never retried.
"""

import logging
from datetime import date
from typing import Callable, Optional, TypeVar

import httpx

from gridthrottle.config import Config
from gridthrottle.market.envelopes import (
    GET_DAM_INDEX,
    GET_DAM_PRICE,
    GET_IM_PRICE,
    EnvelopeDecodeError,
    build_envelope,
    decode_day_ahead_index,
    decode_day_ahead_prices,
    decode_intraday_prices,
    soap_action,
)
from gridthrottle.market.models import DayAheadIndexRecord, FetchResult, PriceRecord

logger = logging.getLogger("gridthrottle.market")

T = TypeVar("T")


class OteClient:
    """Blocking client wrapping the OTE ``PublicDataService`` endpoint."""

    def __init__(self, config: Config) -> None:
        self._url = config.wsdl_url
        self._timeout = config.request_timeout

    @property
    def url(self) -> str:
        return self._url

    # ── Transport ────────────────────────────────────────────────────────

    def _call(
        self,
        operation: str,
        fields: list[tuple[str, object]],
        decode: Callable[[bytes], list[T]],
    ) -> FetchResult[T]:
        """POST one envelope and decode the answer.

        Any status other than 200 is a failure; so is any transport error
        or a body that does not decode.
        """
        try:
            payload = build_envelope(operation, fields)
            headers = {
                "Content-Type": "text/xml",
                "SOAPAction": soap_action(operation),
            }
        except (TypeError, ValueError) as exc:
            logger.error("Error on creating %s request: %s", operation, exc)
            return FetchResult.failure("request", str(exc))

        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(self._url, content=payload, headers=headers)
        except httpx.InvalidURL as exc:
            logger.error("Error on creating %s request: %s", operation, exc)
            return FetchResult.failure("request", str(exc))
        except httpx.HTTPError as exc:
            logger.error("Error on dispatching %s request: %s", operation, exc)
            return FetchResult.failure("transport", str(exc))

        if resp.status_code != 200:
            logger.error(
                "Status %d on %s result: %s",
                resp.status_code, operation, resp.text[:200],
            )
            return FetchResult.failure(
                "status",
                f"{operation} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            records = decode(resp.content)
        except EnvelopeDecodeError as exc:
            logger.error("Error on unmarshaling %s xml: %s", operation, exc)
            return FetchResult.failure("decode", str(exc), status_code=resp.status_code)

        return FetchResult(records=records)

    # ── Operations ───────────────────────────────────────────────────────

    def fetch_day_ahead_prices(
        self,
        start_date: date | str,
        end_date: date | str,
        start_hour: Optional[int] = None,
        end_hour: Optional[int] = None,
        in_eur: Optional[bool] = None,
    ) -> FetchResult[PriceRecord]:
        """Hourly energy volume and price from the day-ahead market.

        ``start_hour``, ``end_hour`` and ``in_eur`` are optional inputs of
        the operation and are left out of the request when ``None``.
        """
        result = self._call(
            GET_DAM_PRICE,
            [
                ("StartDate", start_date),
                ("EndDate", end_date),
                ("StartHour", start_hour),
                ("EndHour", end_hour),
                ("InEur", in_eur),
            ],
            decode_day_ahead_prices,
        )
        _log_prices(result)
        return result

    def fetch_day_ahead_index(
        self,
        start_date: date | str,
        end_date: date | str,
    ) -> FetchResult[DayAheadIndexRecord]:
        """Daily base/peak/off-peak indices of the day-ahead market."""
        result = self._call(
            GET_DAM_INDEX,
            [("StartDate", start_date), ("EndDate", end_date)],
            decode_day_ahead_index,
        )
        for index in result.records:
            logger.info(
                "Date: %s BaseLoad: %f, PeakLoad: %f, OffPeakLoad: %f",
                index.date, index.base_load, index.peak_load, index.off_peak_load,
            )
        return result

    def fetch_intraday_prices(
        self,
        start_date: date | str,
        end_date: date | str,
        start_hour: int,
        end_hour: int,
    ) -> FetchResult[PriceRecord]:
        """Hourly prices and volumes of intraday trades."""
        result = self._call(
            GET_IM_PRICE,
            [
                ("StartDate", start_date),
                ("EndDate", end_date),
                ("StartHour", start_hour),
                ("EndHour", end_hour),
            ],
            decode_intraday_prices,
        )
        _log_prices(result)
        return result


def _log_prices(result: FetchResult[PriceRecord]) -> None:
    for rec in result.records:
        logger.info(
            "Date: %s Hour: %d Price: %f Volume: %s",
            rec.date, rec.hour, rec.price,
            "-" if rec.volume is None else f"{rec.volume:f}",
        )
