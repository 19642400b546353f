"""
Data management module for the storefront admin dashboard.
Provides the document store, blob storage, normalization and analytics.
"""

from .document_store import DocumentStore, Condition, QueryResult
from .blob_storage import (
    BlobStorage,
    get_file_extension,
    validate_file_type,
    validate_file_size,
)
from .live import LiveFeed
from .models import (
    LineItem,
    Transaction,
    CustomerStats,
    CustomerSummary,
    MonthlyRevenue,
    TopProduct,
    GrowthMetrics,
    OverviewData,
)
from .normalizer import normalize_status, normalize_transaction, normalize_transactions
from .analytics import AnalyticsEngine
from .transactions import TransactionService
from .customers import CustomerService
from .products import (
    ProductService,
    ProductInput,
    ImageUpload,
    validate_product_data,
    stock_status,
)
from .overview import load_overview

__all__ = [
    'DocumentStore',
    'Condition',
    'QueryResult',
    'BlobStorage',
    'get_file_extension',
    'validate_file_type',
    'validate_file_size',
    'LiveFeed',
    'LineItem',
    'Transaction',
    'CustomerStats',
    'CustomerSummary',
    'MonthlyRevenue',
    'TopProduct',
    'GrowthMetrics',
    'OverviewData',
    'normalize_status',
    'normalize_transaction',
    'normalize_transactions',
    'AnalyticsEngine',
    'TransactionService',
    'CustomerService',
    'ProductService',
    'ProductInput',
    'ImageUpload',
    'validate_product_data',
    'stock_status',
    'load_overview',
]
