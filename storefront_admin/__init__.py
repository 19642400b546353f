"""
Storefront Admin Dashboard - Consolidated Import Package

This package provides a single import point for the admin dashboard.

Usage:
    from storefront_admin import (
        # Configuration
        AppConfig,

        # Data access
        DocumentStore,
        BlobStorage,
        TransactionService,
        CustomerService,
        ProductService,
        load_overview,

        # Aggregation
        AnalyticsEngine,
        normalize_transactions,

        # UI Components
        plot_monthly_revenue,
        plot_top_products,
    )
"""

# =============================================================================
# Core Configuration & Utilities
# =============================================================================
from .core.config import (
    CUSTOMERS,
    PRODUCTS,
    TRANSACTIONS,
    PRODUCT_CATEGORIES,
    AppConfig,
)
from .core.cache import (
    compute_data_hash,
    clear_all_caches,
    cached_data_loader,
)
from .core.exceptions import (
    StorefrontError,
    DataStoreError,
    BlobStorageError,
    MalformedRecordError,
    ValidationError,
)
from .core.formatting import (
    format_currency,
    format_number,
    format_percentage,
    format_transaction_id,
    format_date,
)

# =============================================================================
# Data Management
# =============================================================================
from .data.document_store import DocumentStore, Condition
from .data.blob_storage import BlobStorage
from .data.live import LiveFeed
from .data.models import (
    Transaction,
    LineItem,
    CustomerSummary,
    MonthlyRevenue,
    TopProduct,
    OverviewData,
)
from .data.normalizer import normalize_transaction, normalize_transactions
from .data.analytics import AnalyticsEngine
from .data.transactions import TransactionService
from .data.customers import CustomerService
from .data.products import ProductService, ProductInput, ImageUpload
from .data.overview import load_overview

# =============================================================================
# UI Components
# =============================================================================
from .ui.charts import plot_monthly_revenue, plot_top_products
from .ui.tables import (
    customers_frame,
    transactions_frame,
    products_frame,
    filter_frame,
    sort_frame,
    paginate_frame,
)

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "1.0.0"
__author__ = "Storefront Team"

__all__ = [
    # Version info
    '__version__',
    '__author__',

    # Configuration
    'CUSTOMERS',
    'PRODUCTS',
    'TRANSACTIONS',
    'PRODUCT_CATEGORIES',
    'AppConfig',

    # Cache utilities
    'compute_data_hash',
    'clear_all_caches',
    'cached_data_loader',

    # Errors
    'StorefrontError',
    'DataStoreError',
    'BlobStorageError',
    'MalformedRecordError',
    'ValidationError',

    # Formatting
    'format_currency',
    'format_number',
    'format_percentage',
    'format_transaction_id',
    'format_date',

    # Data management
    'DocumentStore',
    'Condition',
    'BlobStorage',
    'LiveFeed',
    'Transaction',
    'LineItem',
    'CustomerSummary',
    'MonthlyRevenue',
    'TopProduct',
    'OverviewData',
    'normalize_transaction',
    'normalize_transactions',
    'AnalyticsEngine',
    'TransactionService',
    'CustomerService',
    'ProductService',
    'ProductInput',
    'ImageUpload',
    'load_overview',

    # Visualization
    'plot_monthly_revenue',
    'plot_top_products',

    # Tables
    'customers_frame',
    'transactions_frame',
    'products_frame',
    'filter_frame',
    'sort_frame',
    'paginate_frame',
]
