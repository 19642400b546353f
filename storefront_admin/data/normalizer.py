"""
Transaction normalization.

Two checkout schemas coexist in the transactions collection:

* current: ``cartItems`` line items, ``customerData.{fullName,email}``,
  ``total``, statuses ``success``/``failed``
* legacy: ``products`` line items, top-level ``customerName``,
  ``customerEmail``, ``customerId``, ``amount``

Both are mapped onto ``Transaction``.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..core.exceptions import MalformedRecordError
from ..core.utils import parse_timestamp, to_iso, utc_now
from .models import LineItem, Transaction, STATUS_SYNONYMS

logger = logging.getLogger(__name__)

UNKNOWN_CUSTOMER = "Unknown Customer"
UNKNOWN_PRODUCT = "Unknown Product"


def normalize_status(status: Any) -> Any:
    """Collapse status synonyms; anything else passes through unchanged."""
    if isinstance(status, str):
        return STATUS_SYNONYMS.get(status, status)
    return status


def _number(value: Any, label: str, doc_id: str, default: Optional[float] = None) -> Optional[float]:
    """Coerce a stored number, rejecting values that are not numbers at all."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise MalformedRecordError(f"{label} is not a number: {value!r}", doc_id)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MalformedRecordError(f"{label} is not a number: {value!r}", doc_id)
    if math.isnan(number):
        raise MalformedRecordError(f"{label} is not a number: {value!r}", doc_id)
    return int(number) if number.is_integer() else number


def _line_items(raw: Mapping, doc_id: str) -> Tuple[LineItem, ...]:
    items = raw.get('cartItems')
    if items is None:
        items = raw.get('products')
    if items is None:
        return ()
    if not isinstance(items, (list, tuple)):
        raise MalformedRecordError("line items are not a list", doc_id)

    line_items = []
    for item in items:
        if not isinstance(item, Mapping):
            raise MalformedRecordError(f"line item is not a mapping: {item!r}", doc_id)
        quantity = _number(item.get('quantity'), 'quantity', doc_id, default=1)
        line_items.append(LineItem(
            product_id=str(item.get('productId') or ''),
            product_name=item.get('productName') or UNKNOWN_PRODUCT,
            quantity=quantity,
            price=_number(item.get('price'), 'price', doc_id, default=0),
            size=item.get('size'),
        ))
    return tuple(line_items)


def normalize_transaction(doc_id: str, raw: Any) -> Transaction:
    """
    Map one stored transaction onto the canonical record.

    Args:
        doc_id: Document id
        raw: Stored document

    Raises:
        MalformedRecordError: if the document cannot be interpreted
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecordError("transaction is not a mapping", doc_id)

    customer = raw.get('customerData')
    if customer is not None and not isinstance(customer, Mapping):
        raise MalformedRecordError("customerData is not a mapping", doc_id)
    customer = customer or {}

    products = _line_items(raw, doc_id)

    total = _number(raw.get('total'), 'total', doc_id)
    if total is None:
        total = _number(raw.get('amount'), 'amount', doc_id)
    if total is None:
        total = sum(item.subtotal for item in products) if products else 0

    created_at = raw.get('createdAt')
    if created_at in (None, ""):
        created_at = to_iso(utc_now())
    elif parse_timestamp(created_at) is None:
        raise MalformedRecordError(f"createdAt is not a timestamp: {created_at!r}", doc_id)
    elif not isinstance(created_at, str):
        created_at = to_iso(parse_timestamp(created_at))

    return Transaction(
        id=str(doc_id) if doc_id is not None else '',
        customer_id=customer.get('email') or raw.get('customerId') or '',
        customer_name=customer.get('fullName') or raw.get('customerName') or UNKNOWN_CUSTOMER,
        customer_email=customer.get('email') or raw.get('customerEmail') or '',
        products=products,
        total=total,
        status=normalize_status(raw.get('status')),
        created_at=created_at,
        reference=raw.get('reference'),
        currency=raw.get('currency'),
        subtotal=_number(raw.get('subtotal'), 'subtotal', doc_id),
        tax=_number(raw.get('tax'), 'tax', doc_id),
    )


def normalize_transactions(documents: Iterable[Dict]) -> List[Transaction]:
    """
    Normalize a batch of documents, skipping any that are malformed.
    Each document carries its id under "id".
    """
    transactions = []
    skipped = 0
    for document in documents:
        doc_id = document.get('id') if isinstance(document, Mapping) else None
        try:
            transactions.append(normalize_transaction(doc_id, document))
        except MalformedRecordError as e:
            skipped += 1
            logger.warning(f"Skipping transaction {doc_id}: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed transaction(s)")
    return transactions
