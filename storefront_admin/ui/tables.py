"""
Table view models for the customers, transactions and products pages.

Rows are built as pandas DataFrames so Streamlit can render them directly;
search, sort and pagination operate on the frames.
"""

import math
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from ..core.formatting import format_transaction_id
from ..data.models import CustomerSummary, Transaction, COMPLETED, PENDING, CANCELLED
from ..data.products import stock_status

DEFAULT_PAGE_SIZE = 10

STATUS_COLORS = {
    COMPLETED: "green",
    "success": "green",
    PENDING: "orange",
    CANCELLED: "red",
    "failed": "red",
}

CUSTOMER_STATUS_COLORS = {
    "Active": "green",
    "Pending": "orange",
    "Inactive": "gray",
}


def status_color(status: str) -> str:
    """Badge colour for a transaction status."""
    return STATUS_COLORS.get(status, "gray")


def customers_frame(customers: Sequence[CustomerSummary]) -> pd.DataFrame:
    columns = ['id', 'name', 'email', 'phone', 'location', 'orders',
               'total_spent', 'joined_at', 'status', 'last_order_date']
    return pd.DataFrame([vars(c) for c in customers], columns=columns)


def transactions_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    columns = ['id', 'reference', 'customer_name', 'customer_email', 'items',
               'total', 'status', 'created_at']
    rows = [
        {
            'id': t.id,
            'reference': format_transaction_id(t.id) if t.id else '',
            'customer_name': t.customer_name,
            'customer_email': t.customer_email,
            'items': sum(item.quantity for item in t.products),
            'total': t.total,
            'status': t.status,
            'created_at': t.created_at,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=columns)


def products_frame(products: Sequence[Dict]) -> pd.DataFrame:
    columns = ['id', 'name', 'category', 'price', 'quantity', 'stock', 'sizes', 'image']
    rows = [
        {
            'id': p.get('id'),
            'name': p.get('name'),
            'category': p.get('category'),
            'price': p.get('price'),
            'quantity': p.get('quantity') or 0,
            'stock': stock_status(p.get('quantity') or 0),
            'sizes': ", ".join(p.get('sizes') or []),
            'image': (p.get('image_urls') or [None])[0],
        }
        for p in products
    ]
    return pd.DataFrame(rows, columns=columns)


def filter_frame(df: pd.DataFrame, query: str, columns: List[str]) -> pd.DataFrame:
    """Rows where any of the columns contains the query, case-insensitively."""
    if not query or df.empty:
        return df

    mask = pd.Series(False, index=df.index)
    for column in columns:
        if column in df.columns:
            mask |= df[column].astype(str).str.contains(query, case=False, regex=False, na=False)
    return df[mask]


def sort_frame(df: pd.DataFrame, field: str = None, ascending: bool = True) -> pd.DataFrame:
    """Sort by one column, keeping the current order for ties."""
    if not field or field not in df.columns:
        return df
    return df.sort_values(field, ascending=ascending, kind='stable', na_position='last')


def paginate_frame(
    df: pd.DataFrame,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Tuple[pd.DataFrame, int]:
    """
    Slice out one 1-based page.

    Returns:
        (page rows, total number of pages); page is clamped into range
    """
    total_pages = max(1, math.ceil(len(df) / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return df.iloc[start:start + page_size], total_pages
