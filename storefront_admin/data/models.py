"""
Domain records and dashboard view models.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..core.utils import parse_timestamp


# Transaction statuses after synonym mapping
COMPLETED = "completed"
PENDING = "pending"
CANCELLED = "cancelled"

TRANSACTION_STATUSES = [COMPLETED, PENDING, CANCELLED]

# Legacy checkout statuses and their canonical names
STATUS_SYNONYMS = {
    "success": COMPLETED,
    "failed": CANCELLED,
}

# Customer activity
ACTIVE = "Active"
INACTIVE = "Inactive"
CUSTOMER_PENDING = "Pending"


@dataclass(frozen=True)
class LineItem:
    product_id: str
    product_name: str
    quantity: float
    price: float
    size: Optional[str] = None

    @property
    def subtotal(self) -> float:
        return self.quantity * self.price


@dataclass(frozen=True)
class Transaction:
    """A transaction in canonical form, whatever schema it was stored in."""
    id: str
    customer_id: str
    customer_name: str
    customer_email: str
    products: Tuple[LineItem, ...]
    total: float
    status: str
    created_at: str
    reference: Optional[str] = None
    currency: Optional[str] = None
    subtotal: Optional[float] = None
    tax: Optional[float] = None

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.created_at)

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['products'] = [asdict(item) for item in self.products]
        return data


@dataclass
class CustomerStats:
    orders: int = 0
    total_spent: float = 0.0
    last_order_date: Optional[str] = None
    status: str = CUSTOMER_PENDING


@dataclass
class CustomerSummary:
    """A customer row: the stored profile plus stats derived from orders."""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    orders: int = 0
    total_spent: float = 0.0
    joined_at: Optional[str] = None
    status: str = CUSTOMER_PENDING
    last_order_date: Optional[str] = None


@dataclass
class MonthlyRevenue:
    month: str
    period: str
    revenue: float = 0.0


@dataclass
class TopProduct:
    product_id: str
    name: str
    quantity: float = 0
    revenue: float = 0.0


@dataclass
class GrowthMetrics:
    revenue_growth: float = 0.0
    customer_growth: float = 0.0


@dataclass
class OverviewData:
    total_revenue: float = 0.0
    total_customers: int = 0
    total_products: int = 0
    total_transactions: int = 0
    revenue_growth: float = 0.0
    customer_growth: float = 0.0
    recent_transactions: List[Transaction] = field(default_factory=list)
    monthly_revenue: List[MonthlyRevenue] = field(default_factory=list)
    top_products: List[TopProduct] = field(default_factory=list)
