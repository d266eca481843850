"""Unit tests for the ledger GraphQL scalar codecs."""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import BaseModel, ValidationError

from core.domain.scalars import (
    DateScalar,
    Decimal,
    DecimalScalar,
    Timestamp,
    TimestampScalar,
    decode_date,
    decode_decimal,
    decode_timestamp,
    encode_date,
    encode_decimal,
    encode_timestamp,
    format_timestamp,
    new_date,
    parse_date,
    parse_timestamp,
    to_wire,
)
from core.errors import FormatError

_decimal_text = st.from_regex(r"-?(0|[1-9][0-9]{0,20})(\.[0-9]{1,12})?", fullmatch=True)
_offsets = st.integers(min_value=-14 * 60, max_value=14 * 60).map(
    lambda minutes: timezone(timedelta(minutes=minutes))
)


class TestDate:
    @given(st.dates(min_value=date(1, 1, 1), max_value=date(9999, 12, 31)))
    def test_round_trip(self, value: date) -> None:
        assert decode_date(encode_date(value)) == value

    def test_encode_is_canonical(self) -> None:
        assert encode_date(new_date(2026, 1, 5)) == '"2026-01-05"'
        assert encode_date(date(33, 2, 1)) == '"0033-02-01"'

    @pytest.mark.parametrize(
        "text",
        ["20260101", "2026-1-05", "2026/01/05", "2026-01-05T00:00:00Z", "2026-W01-1", " 2026-01-05", ""],
    )
    def test_rejects_other_formats(self, text: str) -> None:
        with pytest.raises(FormatError) as excinfo:
            parse_date(text)
        assert excinfo.value.text == text
        assert excinfo.value.scalar == "Date"

    def test_rejects_impossible_date(self) -> None:
        with pytest.raises(FormatError):
            parse_date("2026-02-30")

    def test_decode_requires_json_string(self) -> None:
        with pytest.raises(FormatError):
            decode_date("20260105")
        with pytest.raises(FormatError):
            decode_date("not json")

    def test_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="2026/01/05"):
            parse_date("2026/01/05")


class TestDecimal:
    @given(_decimal_text)
    def test_string_round_trip(self, text: str) -> None:
        assert encode_decimal(decode_decimal(json.dumps(text))) == json.dumps(text)

    @given(_decimal_text)
    def test_bare_number_matches_string(self, text: str) -> None:
        assert decode_decimal(text) == decode_decimal(json.dumps(text)) == text

    @pytest.mark.parametrize("raw", ["1.00", "1.10", "0.000", "123456789012345678901234567890.123456789"])
    def test_number_kept_verbatim(self, raw: str) -> None:
        value = decode_decimal(raw)
        assert isinstance(value, Decimal)
        assert str(value) == raw

    def test_bytes_input(self) -> None:
        assert decode_decimal(b'"3.00"') == "3.00"

    @pytest.mark.parametrize("raw", ["true", "null", "[1]", '{"units": "1"}', "NaN", "1.0.0", ""])
    def test_rejects_non_decimal(self, raw: str) -> None:
        with pytest.raises(FormatError):
            decode_decimal(raw)

    def test_to_decimal(self) -> None:
        assert Decimal("1.10").to_decimal() + Decimal("2.00").to_decimal() == Decimal("3.10").to_decimal()
        assert repr(Decimal("1.00")) == "Decimal('1.00')"


class TestTimestamp:
    @given(st.datetimes(timezones=_offsets))
    def test_round_trip_preserves_instant(self, value: datetime) -> None:
        decoded = decode_timestamp(encode_timestamp(value))
        assert decoded == value
        assert decoded.utcoffset() == value.utcoffset()

    @given(st.datetimes(timezones=_offsets), st.integers(min_value=0, max_value=999))
    def test_round_trip_preserves_nanoseconds(self, value: datetime, nanosecond: int) -> None:
        stamp = Timestamp.from_datetime(value, nanosecond)
        decoded = decode_timestamp(encode_timestamp(stamp))
        assert decoded == stamp
        assert decoded.nanosecond == nanosecond
        assert decoded.utcoffset() == value.utcoffset()

    def test_nanosecond_text_round_trips(self) -> None:
        text = "2026-01-01T00:00:00.123456789Z"
        assert format_timestamp(parse_timestamp(text)) == text
        assert format_timestamp(parse_timestamp("2026-01-01T00:00:00.000000001+02:00")) == (
            "2026-01-01T00:00:00.000000001+02:00"
        )

    def test_nanoseconds_affect_equality(self) -> None:
        base = parse_timestamp("2026-01-01T00:00:00.123456Z")
        assert parse_timestamp("2026-01-01T00:00:00.123456001Z") != base
        assert parse_timestamp("2026-01-01T00:00:00.123456000Z") == base
        assert base == datetime(2026, 1, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)

    def test_arithmetic_drops_nanoseconds(self) -> None:
        stamp = parse_timestamp("2026-01-31T10:00:00.123456789Z")
        later = stamp + timedelta(milliseconds=1)
        assert later.nanosecond == 0
        assert format_timestamp(later) == "2026-01-31T10:00:00.124456Z"

    @pytest.mark.parametrize(
        ("text", "micro", "nano"),
        [
            ("2026-01-31T10:00:00Z", 0, 0),
            ("2026-01-31T10:00:00.1Z", 100000, 0),
            ("2026-01-31T10:00:00.123Z", 123000, 0),
            ("2026-01-31T10:00:00.123456Z", 123456, 0),
            ("2026-01-31T10:00:00.1234567Z", 123456, 700),
            ("2026-01-31T10:00:00.123456789Z", 123456, 789),
            ("2026-01-31T10:00:00.1234567891Z", 123456, 789),
        ],
    )
    def test_fraction_lengths(self, text: str, micro: int, nano: int) -> None:
        value = parse_timestamp(text)
        assert value.microsecond == micro
        assert value.nanosecond == nano

    def test_offset(self) -> None:
        value = parse_timestamp("2026-01-31T10:00:00.5-05:30")
        assert value.utcoffset() == -timedelta(hours=5, minutes=30)
        assert format_timestamp(value) == "2026-01-31T10:00:00.5-05:30"

    def test_utc_uses_z(self) -> None:
        value = datetime(2026, 1, 31, 10, 0, 0, 120000, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2026-01-31T10:00:00.12Z"

    @pytest.mark.parametrize(
        "text",
        ["2026-01-31T10:00:00", "2026-01-31 10:00:00Z", "2026-01-31", "2026-01-31T25:00:00Z", "2026-01-31T10:00:00+0100"],
    )
    def test_rejects_invalid(self, text: str) -> None:
        with pytest.raises(FormatError) as excinfo:
            parse_timestamp(text)
        assert excinfo.value.text == text

    def test_encode_requires_offset(self) -> None:
        with pytest.raises(FormatError):
            format_timestamp(datetime(2026, 1, 1))


class _Scalars(BaseModel):
    effective: DateScalar
    units: DecimalScalar
    created: TimestampScalar


class TestPydanticTypes:
    def test_validate_and_dump(self) -> None:
        model = _Scalars.model_validate(
            {"effective": "2026-01-15", "units": "1.00", "created": "2026-01-15T12:00:00.000001Z"}
        )
        assert model.effective == date(2026, 1, 15)
        assert model.units == Decimal("1.00")
        assert model.created.microsecond == 1
        assert model.model_dump(mode="json") == {
            "effective": "2026-01-15",
            "units": "1.00",
            "created": "2026-01-15T12:00:00.000001Z",
        }

    def test_invalid_date_is_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            _Scalars.model_validate({"effective": "15/01/2026", "units": "1", "created": "2026-01-15T12:00:00Z"})

    def test_naive_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _Scalars(effective=date(2026, 1, 1), units=Decimal("1"), created=datetime(2026, 1, 1))


def test_to_wire_encodes_nested_scalars() -> None:
    tx = uuid.UUID("4e6acb34-7ecf-48d3-9892-df400be1998e")
    created = datetime(2026, 1, 31, 0, 0, tzinfo=timezone.utc)
    assert to_wire(
        {
            "transactionId": tx,
            "params": {"effective": date(2026, 1, 31), "amount": Decimal("1.00"), "tags": ("a", 1)},
            "asOf": created,
            "missing": None,
        }
    ) == {
        "transactionId": str(tx),
        "params": {"effective": "2026-01-31", "amount": "1.00", "tags": ["a", 1]},
        "asOf": "2026-01-31T00:00:00Z",
        "missing": None,
    }
