"""
Overview page loader: one concurrent read round, then aggregation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from ..core.config import CUSTOMERS, PRODUCTS, TRANSACTIONS
from ..core.utils import utc_now
from .analytics import AnalyticsEngine
from .document_store import Condition, DocumentStore
from .models import OverviewData
from .normalizer import normalize_transactions

logger = logging.getLogger(__name__)

RECENT_TRANSACTIONS_LIMIT = 10


def load_overview(store: DocumentStore, now: datetime = None) -> OverviewData:
    """
    Build the overview dashboard.

    The four reads run concurrently; the first failure propagates as
    DataStoreError once all of them have settled.
    """
    now = now or utc_now()

    with ThreadPoolExecutor(max_workers=4) as executor:
        customers_future = executor.submit(store.get_collection, CUSTOMERS)
        products_future = executor.submit(store.get_collection, PRODUCTS)
        transactions_future = executor.submit(store.get_collection, TRANSACTIONS)
        recent_future = executor.submit(
            store.query_documents,
            TRANSACTIONS,
            [Condition('status', 'in', ['completed', 'success'])],
            'createdAt',
            'desc',
            RECENT_TRANSACTIONS_LIMIT,
        )

    customers = customers_future.result()
    products = products_future.result()
    transactions = normalize_transactions(transactions_future.result())
    recent = normalize_transactions(recent_future.result().documents)

    completed = AnalyticsEngine.completed(transactions)
    growth = AnalyticsEngine.growth_metrics(completed, customers, now)

    overview = OverviewData(
        total_revenue=AnalyticsEngine.total_revenue(completed),
        total_customers=len(customers),
        total_products=len(products),
        total_transactions=len(completed),
        revenue_growth=growth.revenue_growth,
        customer_growth=growth.customer_growth,
        recent_transactions=recent,
        monthly_revenue=AnalyticsEngine.monthly_revenue(completed, now),
        top_products=AnalyticsEngine.top_products(completed),
    )
    logger.info(
        f"Overview: {overview.total_transactions} completed transactions, "
        f"{overview.total_customers} customers, {overview.total_products} products"
    )
    return overview
