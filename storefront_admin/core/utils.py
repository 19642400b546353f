"""
Shared utility functions for the storefront admin dashboard.

Value conversion to and from DynamoDB, and the UTC time helpers every
aggregation uses. All month arithmetic in this package happens in UTC.
"""

import re
from datetime import datetime, date, timezone
from decimal import Decimal
from typing import Any, Optional

import pandas as pd

# Calendar date at the start of an ISO-8601 string
ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}")


def from_dynamodb(obj: Any) -> Any:
    """
    Recursively convert a DynamoDB item to plain Python values.
    Decimals become int when integral, float otherwise; sets become lists.

    Args:
        obj: Value as returned by the boto3 resource layer

    Returns:
        Equivalent value built from dict/list/str/int/float/bool/None
    """
    if isinstance(obj, Decimal):
        if obj == obj.to_integral_value():
            return int(obj)
        return float(obj)

    if isinstance(obj, dict):
        return {str(k): from_dynamodb(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [from_dynamodb(item) for item in obj]

    if isinstance(obj, (set, frozenset)):
        return [from_dynamodb(item) for item in sorted(obj, key=str)]

    return obj


def to_dynamodb(obj: Any) -> Any:
    """
    Recursively convert a value so boto3 can store it.
    Floats become Decimal (via str, to keep the printed value), datetimes
    become ISO strings, and None values are dropped from mappings.

    Args:
        obj: Any JSON-like Python object

    Returns:
        DynamoDB-compatible version of the object
    """
    if isinstance(obj, bool):
        return obj

    if isinstance(obj, float):
        return Decimal(str(obj))

    if isinstance(obj, datetime):
        return to_iso(obj)
    if isinstance(obj, date):
        return obj.isoformat()

    if isinstance(obj, dict):
        return {str(k): to_dynamodb(v) for k, v in obj.items() if v is not None}

    if isinstance(obj, (list, tuple)):
        return [to_dynamodb(item) for item in obj]

    return obj


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """ISO-8601 string in UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.
    Strings must be ISO-8601; numbers are epoch milliseconds.
    Naive values are taken to be UTC.

    Returns:
        datetime, or None if the value is empty or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds
        parsed = pd.to_datetime(value, unit='ms', utc=True, errors='coerce')
    elif isinstance(value, str):
        if not ISO_DATE_PREFIX.match(value):
            return None
        parsed = pd.to_datetime(value, utc=True, errors='coerce', format='ISO8601')
    else:
        return None

    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def month_start(value: datetime) -> datetime:
    """First instant of the UTC calendar month containing value."""
    value = value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime(value.year, value.month, 1, tzinfo=timezone.utc)


def shift_months(value: datetime, months: int) -> datetime:
    """First instant of the month `months` away from value's month."""
    start = month_start(value)
    index = start.year * 12 + (start.month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1, tzinfo=timezone.utc)
