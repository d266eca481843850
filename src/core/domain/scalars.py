"""Scalars GraphQL del ledger (Date, Decimal, Timestamp y pass-through).

Por qué un módulo propio:
- El esquema declara scalars con formato de cable exacto; aquí viven los
  codecs puros (texto <-> valor) y los tipos anotados para Pydantic.
- `Decimal` se guarda como texto para no perder precisión por floats.

Formatos:
- Date: `YYYY-MM-DD`
- Decimal: string JSON (o número JSON, aceptado tal cual)
- Timestamp: RFC 3339 con offset obligatorio y fracción opcional (hasta
  nanosegundos, ver `Timestamp`)
"""

from __future__ import annotations

import decimal
import json
import re
import uuid
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import BaseModel, PlainSerializer, PlainValidator

from core.errors import FormatError

_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_TIMESTAMP_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})"
    r"T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(?:\.([0-9]+))?"
    r"(Z|[+-][0-9]{2}:[0-9]{2})"
)

# Simple string-based scalars.
CurrencyCode = str
EntryType = str
Expression = str
InterpolatedExpression = str
Uint8Array = str

# Map-based scalars.
ExpressionMap = dict[str, str]
ExpressionNestedMap = dict[str, Any]
JSON = dict[str, Any]
Value = Any

UUID = uuid.UUID


class Decimal(str):
    """Decimal de precisión arbitraria guardado como su texto exacto."""

    __slots__ = ()

    def to_decimal(self) -> decimal.Decimal:
        return decimal.Decimal(str(self))

    def __repr__(self) -> str:
        return f"Decimal({str.__repr__(self)})"


def new_date(year: int, month: int, day: int) -> date:
    return date(year, month, day)


def _load_json(scalar: str, raw: str | bytes, **kwargs: Any) -> Any:
    try:
        return json.loads(raw, **kwargs)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise FormatError(scalar, _as_text(raw), str(exc)) from exc


def _as_text(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


# ---------------------------------------------------------------------------
# Date
# ---------------------------------------------------------------------------


def format_date(value: date) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date(text: str) -> date:
    """Parsea exactamente `YYYY-MM-DD`; cualquier otra forma es `FormatError`."""

    match = _DATE_RE.fullmatch(text)
    if match is None:
        raise FormatError("Date", text, "expected YYYY-MM-DD")
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise FormatError("Date", text, str(exc)) from exc


def encode_date(value: date) -> str:
    return json.dumps(format_date(value))


def decode_date(raw: str | bytes) -> date:
    value = _load_json("Date", raw)
    if not isinstance(value, str):
        raise FormatError("Date", _as_text(raw), "expected a JSON string")
    return parse_date(value)


# ---------------------------------------------------------------------------
# Decimal
# ---------------------------------------------------------------------------


def _reject_constant(name: str) -> Any:
    raise FormatError("Decimal", name, "non-finite numbers are not decimals")


def encode_decimal(value: Decimal | str) -> str:
    return json.dumps(str(value))


def decode_decimal(raw: str | bytes) -> Decimal:
    """Acepta string JSON o número JSON; ambos se guardan sin normalizar.

    `"1.00"` y `1.00` producen `Decimal("1.00")`; no se redondea ni se
    recortan ceros.
    """

    value = _load_json(
        "Decimal",
        raw,
        parse_float=str,
        parse_int=str,
        parse_constant=_reject_constant,
    )
    if not isinstance(value, str):
        raise FormatError("Decimal", _as_text(raw), "expected a JSON string or number")
    return Decimal(value)


# ---------------------------------------------------------------------------
# Timestamp
# ---------------------------------------------------------------------------


def _rebuild_timestamp(cls: type, args: tuple, nanosecond: int) -> "Timestamp":
    value = cls(*args)
    value._nanosecond = nanosecond
    return value


class Timestamp(datetime):
    """`datetime` con precisión de nanosegundos.

    `datetime` solo guarda microsegundos; `nanosecond` (0-999) conserva los
    dígitos siguientes para que un timestamp del ledger vuelva al cable
    intacto. La aritmética de `datetime` devuelve instancias con
    `nanosecond == 0`.
    """

    def __new__(cls, *args: Any, nanosecond: int = 0, **kwargs: Any) -> "Timestamp":
        if not 0 <= nanosecond <= 999:
            raise ValueError("nanosecond must be in 0..999")
        value = super().__new__(cls, *args, **kwargs)
        value._nanosecond = nanosecond
        return value

    @classmethod
    def from_datetime(cls, value: datetime, nanosecond: int = 0) -> "Timestamp":
        return cls(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            value.tzinfo,
            fold=value.fold,
            nanosecond=nanosecond,
        )

    @property
    def nanosecond(self) -> int:
        return getattr(self, "_nanosecond", 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, datetime):
            return NotImplemented
        return super().__eq__(other) and self.nanosecond == getattr(other, "nanosecond", 0)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = datetime.__hash__

    def __reduce_ex__(self, protocol: Any) -> tuple:
        args = (
            self.year,
            self.month,
            self.day,
            self.hour,
            self.minute,
            self.second,
            self.microsecond,
            self.tzinfo,
        )
        return (_rebuild_timestamp, (type(self), args, self.nanosecond))

    def __repr__(self) -> str:
        text = super().__repr__()
        if not self.nanosecond:
            return text
        return f"{text[:-1]}, nanosecond={self.nanosecond})"


def format_timestamp(value: datetime) -> str:
    """RFC 3339 con la fracción mínima que conserva el instante (`Z` en UTC).

    Si `value` es un `Timestamp`, la fracción llega hasta nanosegundos.
    """

    offset = value.utcoffset()
    if offset is None:
        raise FormatError("Timestamp", value.isoformat(), "missing UTC offset")

    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    nanos = value.microsecond * 1000 + getattr(value, "nanosecond", 0)
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")

    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{text}{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


def parse_timestamp(text: str) -> Timestamp:
    """Parsea RFC 3339; la fracción puede tener cualquier número de dígitos.

    Se conservan hasta nueve dígitos (nanosegundos, la precisión del ledger);
    los siguientes se truncan.
    """

    match = _TIMESTAMP_RE.fullmatch(text)
    if match is None:
        raise FormatError("Timestamp", text, "expected RFC 3339 with offset")
    year, month, day, hour, minute, second, fraction, offset = match.groups()

    nanos = int((fraction or "0")[:9].ljust(9, "0"))
    try:
        if offset == "Z":
            tz = timezone.utc
        else:
            sign = -1 if offset[0] == "-" else 1
            hours, minutes = int(offset[1:3]), int(offset[4:6])
            if minutes >= 60:
                raise ValueError("offset minutes out of range")
            tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
        return Timestamp(
            int(year),
            int(month),
            int(day),
            int(hour),
            int(minute),
            int(second),
            nanos // 1000,
            tzinfo=tz,
            nanosecond=nanos % 1000,
        )
    except ValueError as exc:
        raise FormatError("Timestamp", text, str(exc)) from exc


def encode_timestamp(value: datetime) -> str:
    return json.dumps(format_timestamp(value))


def decode_timestamp(raw: str | bytes) -> Timestamp:
    value = _load_json("Timestamp", raw)
    if not isinstance(value, str):
        raise FormatError("Timestamp", _as_text(raw), "expected a JSON string")
    return parse_timestamp(value)


# ---------------------------------------------------------------------------
# Pydantic
# ---------------------------------------------------------------------------


def _validate_date(value: object) -> date:
    if isinstance(value, datetime):
        raise FormatError("Date", value.isoformat(), "expected a date without time")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value)
    raise FormatError("Date", value, "expected YYYY-MM-DD")


def _validate_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise FormatError("Decimal", value, "expected a string or number")
    if isinstance(value, (str, int, decimal.Decimal)):
        return Decimal(str(value))
    if isinstance(value, float):
        return Decimal(repr(value))
    raise FormatError("Decimal", value, "expected a string or number")


def _validate_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        if value.utcoffset() is None:
            raise FormatError("Timestamp", value.isoformat(), "missing UTC offset")
        return value
    if isinstance(value, str):
        return parse_timestamp(value)
    raise FormatError("Timestamp", value, "expected RFC 3339 text")


DateScalar = Annotated[date, PlainValidator(_validate_date), PlainSerializer(format_date, return_type=str)]
DecimalScalar = Annotated[Decimal, PlainValidator(_validate_decimal), PlainSerializer(str, return_type=str)]
TimestampScalar = Annotated[
    datetime,
    PlainValidator(_validate_timestamp),
    PlainSerializer(format_timestamp, return_type=str),
]


def to_wire(value: Any) -> Any:
    """Convierte variables GraphQL a valores JSON usando los codecs de arriba."""

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (Decimal, decimal.Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return format_date(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Mapping):
        return {str(k): to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    return value
