"""
UI components for the storefront admin dashboard.
Provides chart builders and table helpers for the Streamlit pages.
"""

from .charts import plot_monthly_revenue, plot_top_products
from .tables import (
    status_color,
    customers_frame,
    transactions_frame,
    products_frame,
    filter_frame,
    sort_frame,
    paginate_frame,
    CUSTOMER_STATUS_COLORS,
)

__all__ = [
    # Charts
    'plot_monthly_revenue',
    'plot_top_products',
    # Tables
    'status_color',
    'customers_frame',
    'transactions_frame',
    'products_frame',
    'filter_frame',
    'sort_frame',
    'paginate_frame',
    'CUSTOMER_STATUS_COLORS',
]
