"""Point list parsing and coercion.

This module handles:
- Parsing typed or pasted point lists ("1,2; 3,4", one pair per line, "(5, 6)")
- Coercing tuples, mappings and DataPoints into validated DataPoints
- Input limits (length, point count) and finite-coordinate checks
"""

from __future__ import annotations

import math
import re
from fractions import Fraction
from typing import Any, Iterable, Mapping

from .config import MAX_INPUT_LENGTH, MAX_POINTS
from .types import DataPoint, ErrorCode, ValidationError

RECORD_SEPARATOR = re.compile(r"[;\n\r]+")
PAREN_GROUP = re.compile(r"[(\[]([^)\]]*)[)\]]")
FIELD_SEPARATOR = re.compile(r"[,\s]+")


def parse_number(token: str) -> float:
    """Parse a coordinate such as "2", "-0.5", "1e3" or "1/3".

    Raises:
        ValidationError: If the token is not a finite number
    """
    token = token.strip()
    try:
        value = float(token)
    except ValueError:
        try:
            value = float(Fraction(token))
        except (ValueError, ZeroDivisionError):
            raise ValidationError(
                f"Invalid coordinate {token!r}", ErrorCode.INVALID_POINT
            ) from None
    if not math.isfinite(value):
        raise ValidationError(
            f"Coordinate must be finite, got {token!r}", ErrorCode.INVALID_POINT
        )
    return value


def _pair_from_fields(text: str) -> DataPoint:
    fields = [f for f in FIELD_SEPARATOR.split(text.strip()) if f]
    if len(fields) != 2:
        raise ValidationError(
            f"Expected an x, y pair, got {text.strip()!r}", ErrorCode.INVALID_POINT
        )
    return DataPoint(parse_number(fields[0]), parse_number(fields[1]))


def parse_points(text: str) -> list[DataPoint]:
    """Parse a point list.

    Records are separated by newlines or semicolons. A record is either a
    bare pair ("1,2", "1 2", "1\\t2") or one or more parenthesised pairs
    ("(1, 2) (3, 4)").

    Args:
        text: Raw point list

    Returns:
        Points in input order

    Raises:
        ValidationError: EMPTY_INPUT, TOO_LONG, TOO_MANY_POINTS or INVALID_POINT
    """
    if text is None or not text.strip():
        raise ValidationError("Point list cannot be empty", ErrorCode.EMPTY_INPUT)
    if len(text) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Input too long (>{MAX_INPUT_LENGTH} characters)", ErrorCode.TOO_LONG
        )

    points: list[DataPoint] = []
    for record in RECORD_SEPARATOR.split(text):
        record = record.strip()
        if not record:
            continue
        groups = PAREN_GROUP.findall(record)
        if groups:
            leftover = PAREN_GROUP.sub("", record).strip(" ,\t")
            if leftover:
                raise ValidationError(
                    f"Unexpected text {leftover!r} in {record!r}", ErrorCode.INVALID_POINT
                )
            points.extend(_pair_from_fields(group) for group in groups)
        else:
            points.append(_pair_from_fields(record))
        if len(points) > MAX_POINTS:
            raise ValidationError(
                f"Too many points (>{MAX_POINTS})", ErrorCode.TOO_MANY_POINTS
            )

    if not points:
        raise ValidationError("Point list cannot be empty", ErrorCode.EMPTY_INPUT)
    return points


def _coordinate(value: Any) -> float:
    if isinstance(value, str):
        return parse_number(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid coordinate {value!r}", ErrorCode.INVALID_POINT
        ) from None
    if not math.isfinite(number):
        raise ValidationError(
            f"Coordinate must be finite, got {value!r}", ErrorCode.INVALID_POINT
        )
    return number


def coerce_point(item: Any) -> DataPoint:
    """Convert a DataPoint, (x, y) pair or {"x": .., "y": ..} mapping."""
    if isinstance(item, DataPoint):
        return DataPoint(_coordinate(item.x), _coordinate(item.y))
    if isinstance(item, Mapping):
        if "x" not in item or "y" not in item:
            raise ValidationError(
                f"Point mapping needs 'x' and 'y' keys, got {sorted(item)!r}",
                ErrorCode.INVALID_POINT,
            )
        return DataPoint(_coordinate(item["x"]), _coordinate(item["y"]))
    if isinstance(item, (str, bytes)):
        return _pair_from_fields(item if isinstance(item, str) else item.decode())
    try:
        x, y = item
    except (TypeError, ValueError):
        raise ValidationError(
            f"Point must be an (x, y) pair, got {item!r}", ErrorCode.INVALID_POINT
        ) from None
    return DataPoint(_coordinate(x), _coordinate(y))


def coerce_points(items: Iterable[Any]) -> list[DataPoint]:
    """Convert a point-list string or an iterable of point-like items."""
    if items is None:
        raise ValidationError("Point list cannot be empty", ErrorCode.EMPTY_INPUT)
    if isinstance(items, str):
        return parse_points(items)
    try:
        iterator = iter(items)
    except TypeError:
        raise ValidationError(
            f"Points must be a sequence of (x, y) pairs, got {type(items).__name__}",
            ErrorCode.INVALID_POINT,
        ) from None
    points = [coerce_point(item) for item in iterator]
    if len(points) > MAX_POINTS:
        raise ValidationError(f"Too many points (>{MAX_POINTS})", ErrorCode.TOO_MANY_POINTS)
    return points
