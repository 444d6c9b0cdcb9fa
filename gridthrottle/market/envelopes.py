"""SOAP framing for the OTE public data service.

Requests are rendered from a fixed SOAP 1.1 template.  Responses are
decoded by three flat decoders, one per operation, each turning the
``<Op>Response/Result`` children into typed records.  Decoding is all or
nothing: any malformed record fails the whole document.
"""

from datetime import date
from typing import Callable, Iterable, Optional, TypeVar
from xml.etree import ElementTree
from xml.sax.saxutils import escape

from gridthrottle.market.models import DayAheadIndexRecord, PriceRecord

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
OTE_PUBLIC_NS = "http://www.ote-cr.cz/schema/service/public"

GET_DAM_PRICE = "GetDamPriceE"
GET_DAM_INDEX = "GetDamIndexE"
GET_IM_PRICE = "GetImPriceE"

_ENVELOPE_TEMPLATE = """<?xml version="1.0" encoding="UTF-8" ?>
<soapenv:Envelope
   xmlns:soapenv="{soap_ns}"
   xmlns:pub="{pub_ns}">
    <soapenv:Header/>
    <soapenv:Body>
        <pub:{operation}>
{fields}
        </pub:{operation}>
    </soapenv:Body>
</soapenv:Envelope>"""

T = TypeVar("T")


class EnvelopeDecodeError(ValueError):
    """Raised when a response envelope does not match the expected schema."""


# ── Requests ─────────────────────────────────────────────────────────────


def soap_action(operation: str) -> str:
    """Return the ``SOAPAction`` header value, format ``urn:<Op>``."""
    return f"urn:{operation}"


def build_envelope(operation: str, fields: Iterable[tuple[str, object]]) -> bytes:
    """Render the request envelope for *operation*.

    *fields* are ``(name, value)`` pairs written as ``pub:<name>`` children
    in order.  ``None`` values are left out; booleans are written the way
    XML Schema spells them.
    """
    lines = []
    for name, value in fields:
        if value is None:
            continue
        if isinstance(value, bool):
            text = "true" if value else "false"
        elif isinstance(value, date):
            text = value.isoformat()
        else:
            text = escape(str(value))
        lines.append(f"            <pub:{name}>{text}</pub:{name}>")

    body = _ENVELOPE_TEMPLATE.format(
        soap_ns=SOAP_ENV_NS,
        pub_ns=OTE_PUBLIC_NS,
        operation=operation,
        fields="\n".join(lines),
    )
    return body.encode("utf-8")


# ── Responses ────────────────────────────────────────────────────────────


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ElementTree.Element, name: str) -> Optional[ElementTree.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _result_items(payload: bytes, operation: str, item_name: str) -> list[ElementTree.Element]:
    try:
        root = ElementTree.fromstring(payload)
    except (ElementTree.ParseError, LookupError, ValueError) as exc:
        # LookupError: declared encoding unknown to expat
        raise EnvelopeDecodeError(f"malformed XML: {exc}") from exc

    if _local(root.tag) != "Envelope":
        raise EnvelopeDecodeError(f"expected Envelope root, got {_local(root.tag)!r}")
    body = _child(root, "Body")
    if body is None:
        raise EnvelopeDecodeError("envelope has no Body")

    response = body.find(f"{{{OTE_PUBLIC_NS}}}{operation}Response")
    if response is None:
        raise EnvelopeDecodeError(f"Body has no {operation}Response in {OTE_PUBLIC_NS}")

    result = _child(response, "Result")
    if result is None:
        return []
    return [el for el in result if _local(el.tag) == item_name]


def _text(item: ElementTree.Element, name: str, required: bool = True) -> Optional[str]:
    el = _child(item, name)
    if el is None or el.text is None or not el.text.strip():
        if required:
            raise EnvelopeDecodeError(f"record is missing {name}")
        return None
    return el.text.strip()


def _coerce(item: ElementTree.Element, name: str, convert: Callable[[str], T], required: bool = True) -> Optional[T]:
    raw = _text(item, name, required)
    if raw is None:
        return None
    try:
        return convert(raw)
    except ValueError as exc:
        raise EnvelopeDecodeError(f"cannot read {name} from {raw!r}: {exc}") from exc


def _to_date(raw: str) -> date:
    # The service may append a zone designator ("2024-03-01+01:00").
    return date.fromisoformat(raw[:10])


def _price_records(payload: bytes, operation: str) -> list[PriceRecord]:
    return [
        PriceRecord(
            date=_coerce(item, "Date", _to_date),
            hour=_coerce(item, "Hour", int),
            price=_coerce(item, "Price", float),
            volume=_coerce(item, "Volume", float, required=False),
        )
        for item in _result_items(payload, operation, "Item")
    ]


def decode_day_ahead_prices(payload: bytes) -> list[PriceRecord]:
    """Decode a ``GetDamPriceEResponse`` envelope."""
    return _price_records(payload, GET_DAM_PRICE)


def decode_intraday_prices(payload: bytes) -> list[PriceRecord]:
    """Decode a ``GetImPriceEResponse`` envelope."""
    return _price_records(payload, GET_IM_PRICE)


def decode_day_ahead_index(payload: bytes) -> list[DayAheadIndexRecord]:
    """Decode a ``GetDamIndexEResponse`` envelope."""
    records = []
    for item in _result_items(payload, GET_DAM_INDEX, "DamIndex"):
        records.append(
            DayAheadIndexRecord(
                date=_coerce(item, "Date", _to_date),
                base_load=_coerce(item, "BaseLoad", float),
                peak_load=_coerce(item, "PeakLoad", float),
                off_peak_load=_coerce(item, "OffpeakLoad", float),
                eur_rate=_coerce(item, "EurRate", float, required=False),
                emergency=_coerce(item, "Emerg", int, required=False),
            )
        )
    return records
