"""
Customer profiles and their derived order statistics.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..core.config import CUSTOMERS
from ..core.exceptions import ValidationError
from ..core.utils import to_iso, utc_now
from .analytics import AnalyticsEngine
from .document_store import DocumentStore
from .models import CustomerSummary
from .transactions import TransactionService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('fullName', 'phone', 'location')


class CustomerService:
    """CRUD on the customers collection, keyed by email."""

    def __init__(self, store: DocumentStore, transactions: TransactionService = None):
        self.store = store
        self.transactions = transactions or TransactionService(store)

    def get_all_customers(self) -> List[Dict]:
        """All customer profiles, newest first."""
        return self.store.fetch_ordered(CUSTOMERS, 'createdAt', 'desc')

    def get_customer_by_email(self, email: str) -> Optional[Dict]:
        return self.store.get_document(CUSTOMERS, email)

    def create_customer(self, email: str, full_name: str, phone: str = None,
                        location: str = None) -> None:
        if not email or not email.strip():
            raise ValidationError(["Customer email is required"])

        now = to_iso(utc_now())
        self.store.set_document(CUSTOMERS, email.strip(), {
            'email': email.strip(),
            'fullName': full_name,
            'phone': phone,
            'location': location,
            'createdAt': now,
            'updatedAt': now,
        })
        logger.info(f"Created customer {email}")

    def update_customer(self, email: str, updates: Dict) -> None:
        """Update profile fields; email and createdAt are never changed."""
        changes = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}
        changes['updatedAt'] = to_iso(utc_now())
        self.store.update_document(CUSTOMERS, email, changes)

    def delete_customer(self, email: str) -> None:
        self.store.delete_document(CUSTOMERS, email)
        logger.info(f"Deleted customer {email}")

    def search_customers(self, term: str) -> List[Dict]:
        """Case-insensitive match on name or email, done client side."""
        needle = term.lower()
        return [
            customer for customer in self.get_all_customers()
            if needle in (customer.get('fullName') or '').lower()
            or needle in (customer.get('email') or '').lower()
        ]

    # -------------------------------------------------------------------------
    # Summaries
    # -------------------------------------------------------------------------

    def summarize(self, customer: Dict, now: datetime = None) -> CustomerSummary:
        """One customer row with stats derived from their transactions."""
        email = customer.get('email') or customer.get('id') or ''
        stats = AnalyticsEngine.compute_customer_stats(
            self.transactions.get_transactions_by_customer, email, now
        )
        return CustomerSummary(
            id=customer.get('id') or email,
            name=customer.get('fullName') or customer.get('name') or 'Unknown Customer',
            email=email,
            phone=customer.get('phone'),
            location=customer.get('location'),
            orders=stats.orders,
            total_spent=stats.total_spent,
            joined_at=customer.get('createdAt') or to_iso(utc_now()),
            status=stats.status,
            last_order_date=stats.last_order_date,
        )

    def summarize_all(self, customers: List[Dict], now: datetime = None,
                      max_workers: int = None) -> List[CustomerSummary]:
        """
        Summaries for every customer, highest spend first.

        One transactions read per customer, all in flight at once unless
        max_workers caps the pool.
        """
        if not customers:
            return []

        workers = max_workers or self.store.config.customer_stats_workers or len(customers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            summaries = list(executor.map(lambda c: self.summarize(c, now), customers))

        summaries.sort(key=lambda s: s.total_spent, reverse=True)
        return summaries

    def list_customer_summaries(self, now: datetime = None) -> List[CustomerSummary]:
        """Load every customer and derive their stats."""
        return self.summarize_all(self.store.get_collection(CUSTOMERS), now)

    def subscribe(
        self,
        callback: Callable[[List[CustomerSummary]], None],
        on_error: Callable[[Exception], None] = None,
        interval: float = None,
    ) -> Callable[[], None]:
        """Live feed of customer summaries, recomputed on every change."""
        def on_snapshot(documents):
            callback(self.summarize_all(documents))

        return self.store.subscribe(CUSTOMERS, on_snapshot, on_error=on_error, interval=interval)
