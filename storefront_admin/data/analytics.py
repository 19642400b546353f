"""
Analytics engine for the overview and customer pages.

Pure, synchronous transforms over transactions and customers already loaded
into memory. Calendar months are UTC months throughout.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Sequence

from ..core.formatting import format_month
from ..core.utils import parse_timestamp, shift_months, utc_now
from .models import (
    ACTIVE,
    INACTIVE,
    CUSTOMER_PENDING,
    CustomerStats,
    GrowthMetrics,
    MonthlyRevenue,
    TopProduct,
    Transaction,
)

logger = logging.getLogger(__name__)

REVENUE_WINDOW_MONTHS = 6
TOP_PRODUCTS_LIMIT = 5
ACTIVE_WINDOW_DAYS = 30


class AnalyticsEngine:
    """Derives dashboard metrics from transactions and customers."""

    @staticmethod
    def completed(transactions: Iterable[Transaction]) -> List[Transaction]:
        return [t for t in transactions if t.is_completed]

    @staticmethod
    def total_revenue(transactions: Iterable[Transaction]) -> float:
        return sum(t.total for t in transactions)

    @staticmethod
    def monthly_revenue(
        transactions: Iterable[Transaction],
        now: datetime = None,
        months: int = REVENUE_WINDOW_MONTHS,
    ) -> List[MonthlyRevenue]:
        """
        Revenue per calendar month over the trailing window ending at `now`.

        Always returns exactly `months` buckets, oldest first, with empty
        months present as zero. Callers pass completed transactions.
        """
        now = now or utc_now()

        monthly_data: Dict[tuple, float] = {}
        for transaction in transactions:
            created = transaction.created
            if created is None:
                continue
            key = (created.year, created.month)
            monthly_data[key] = monthly_data.get(key, 0) + transaction.total

        buckets = []
        for offset in range(months - 1, -1, -1):
            start = shift_months(now, -offset)
            buckets.append(MonthlyRevenue(
                month=format_month(start),
                period=f"{start.year}-{start.month:02d}",
                revenue=monthly_data.get((start.year, start.month), 0),
            ))
        return buckets

    @staticmethod
    def growth_rate(current: float, previous: float) -> float:
        """
        Percentage change from previous to current.
        A previous value of zero yields 0.0 rather than an infinite rate.
        """
        if previous > 0:
            return (current - previous) / previous * 100
        return 0.0

    @staticmethod
    def growth_metrics(
        transactions: Sequence[Transaction],
        customers: Sequence[Dict],
        now: datetime = None,
    ) -> GrowthMetrics:
        """
        Month-over-month growth of revenue and of new customers.

        Compares the last full calendar month with the one before it.
        Callers pass completed transactions; customers are raw documents
        whose `createdAt` marks acquisition.
        """
        now = now or utc_now()
        this_month = shift_months(now, 0)
        last_month = shift_months(now, -1)
        month_before = shift_months(now, -2)

        def in_range(value, start, end) -> bool:
            return value is not None and start <= value < end

        last_revenue = sum(
            t.total for t in transactions if in_range(t.created, last_month, this_month)
        )
        previous_revenue = sum(
            t.total for t in transactions if in_range(t.created, month_before, last_month)
        )

        joined = [parse_timestamp(c.get('createdAt')) for c in customers]
        last_customers = sum(1 for d in joined if in_range(d, last_month, this_month))
        previous_customers = sum(1 for d in joined if in_range(d, month_before, last_month))

        return GrowthMetrics(
            revenue_growth=AnalyticsEngine.growth_rate(last_revenue, previous_revenue),
            customer_growth=AnalyticsEngine.growth_rate(last_customers, previous_customers),
        )

    @staticmethod
    def top_products(
        transactions: Iterable[Transaction],
        limit: int = TOP_PRODUCTS_LIMIT,
    ) -> List[TopProduct]:
        """
        Best-selling products by revenue across all line items.
        Equal revenues keep the order in which products were first seen.
        """
        product_sales: Dict[str, TopProduct] = {}

        for transaction in transactions:
            for item in transaction.products:
                if item.product_id not in product_sales:
                    product_sales[item.product_id] = TopProduct(
                        product_id=item.product_id,
                        name=item.product_name,
                    )
                entry = product_sales[item.product_id]
                entry.quantity += item.quantity
                entry.revenue += item.quantity * item.price

        ranked = [p for p in product_sales.values() if p.quantity > 0]
        # sorted() is stable, so ties stay in first-seen order
        ranked = sorted(ranked, key=lambda p: p.revenue, reverse=True)
        return ranked[:limit]

    @staticmethod
    def derive_customer_stats(
        transactions: Iterable[Transaction],
        now: datetime = None,
    ) -> CustomerStats:
        """Order count, spend, last order and activity from a customer's transactions."""
        now = parse_timestamp(now) if now else utc_now()
        completed = [t for t in transactions if t.is_completed and t.created is not None]

        if not completed:
            return CustomerStats()

        last_order = max(completed, key=lambda t: t.created)
        cutoff = now - timedelta(days=ACTIVE_WINDOW_DAYS)

        return CustomerStats(
            orders=len(completed),
            total_spent=sum(t.total for t in completed),
            last_order_date=last_order.created_at,
            status=ACTIVE if last_order.created > cutoff else INACTIVE,
        )

    @staticmethod
    def compute_customer_stats(
        fetch_transactions: Callable[[str], List[Transaction]],
        email: str,
        now: datetime = None,
    ) -> CustomerStats:
        """
        Fetch a customer's transactions and derive their stats.
        Any failure yields the empty Pending stats so the row still renders.
        """
        try:
            return AnalyticsEngine.derive_customer_stats(fetch_transactions(email), now)
        except Exception as e:
            logger.error(f"Error calculating stats for customer {email}: {e}")
            return CustomerStats(status=CUSTOMER_PENDING)

    @staticmethod
    def product_stats(top_products: Sequence[TopProduct]) -> Dict:
        """Totals and per-product share of the best seller, for the top products card."""
        if not top_products:
            return {'total_quantity': 0, 'total_revenue': 0, 'max_revenue': 0, 'shares': []}

        max_revenue = max(p.revenue for p in top_products)
        return {
            'total_quantity': sum(p.quantity for p in top_products),
            'total_revenue': sum(p.revenue for p in top_products),
            'max_revenue': max_revenue,
            'shares': [
                (p, p.revenue / max_revenue * 100 if max_revenue > 0 else 0.0)
                for p in top_products
            ],
        }
