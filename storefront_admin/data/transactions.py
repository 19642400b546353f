"""
Transaction reads and status changes.
"""

import logging
from typing import Callable, List, Optional

from ..core.config import TRANSACTIONS
from ..core.exceptions import DataStoreError, ValidationError
from ..core.utils import to_iso, utc_now
from .document_store import DocumentStore
from .models import Transaction, TRANSACTION_STATUSES, COMPLETED, CANCELLED
from .normalizer import normalize_transaction, normalize_transactions

logger = logging.getLogger(__name__)


class TransactionService:
    """Reads transactions in canonical form and updates their status."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_all_transactions(self) -> List[Transaction]:
        """All transactions, newest first. Malformed documents are skipped."""
        documents = self.store.fetch_ordered(TRANSACTIONS, 'createdAt', 'desc')
        transactions = normalize_transactions(documents)
        logger.info(f"Loaded {len(transactions)} transactions")
        return transactions

    def get_transaction_by_id(self, transaction_id: str) -> Optional[Transaction]:
        document = self.store.get_document(TRANSACTIONS, transaction_id)
        if document is None:
            return None
        return normalize_transaction(transaction_id, document)

    def get_transactions_by_customer(self, customer_email: str) -> List[Transaction]:
        """Transactions placed through checkout by the given customer email."""
        documents = self.store.fetch_where(TRANSACTIONS, 'customerData.email', '==', customer_email)
        return normalize_transactions(documents)

    def update_transaction_status(self, transaction_id: str, status: str) -> None:
        if status not in TRANSACTION_STATUSES:
            raise ValidationError([f"Invalid transaction status: {status}"])

        try:
            self.store.update_document(TRANSACTIONS, transaction_id, {
                'status': status,
                'updatedAt': to_iso(utc_now()),
            })
        except DataStoreError:
            logger.error(f"Failed to update transaction {transaction_id} to {status}")
            raise
        logger.info(f"Transaction {transaction_id} marked {status}")

    def cancel_transaction(self, transaction_id: str) -> None:
        self.update_transaction_status(transaction_id, CANCELLED)

    def complete_transaction(self, transaction_id: str) -> None:
        self.update_transaction_status(transaction_id, COMPLETED)

    def subscribe(
        self,
        callback: Callable[[List[Transaction]], None],
        on_error: Callable[[Exception], None] = None,
        interval: float = None,
    ) -> Callable[[], None]:
        """Live feed of all transactions, newest first."""
        def on_snapshot(documents):
            callback(normalize_transactions(documents))

        return self.store.subscribe(
            TRANSACTIONS,
            on_snapshot,
            on_error=on_error,
            interval=interval,
            order_by='createdAt',
            direction='desc',
        )
