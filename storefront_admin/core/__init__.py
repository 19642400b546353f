"""
Core utilities for the storefront admin dashboard.
Provides configuration, caching, errors, formatting and shared helpers.
"""

from .cache import (
    compute_data_hash,
    clear_all_caches,
    cached_data_loader,
)
from .config import (
    CUSTOMERS,
    PRODUCTS,
    TRANSACTIONS,
    COLLECTIONS,
    COLLECTION_KEYS,
    PRODUCT_CATEGORIES,
    FOOTWEAR_CATEGORIES,
    COMMON_SIZES,
    AppConfig,
)
from .exceptions import (
    StorefrontError,
    DataStoreError,
    BlobStorageError,
    MalformedRecordError,
    ValidationError,
)
from .formatting import (
    format_currency,
    format_number,
    format_percentage,
    format_transaction_id,
    format_date,
    format_month,
)
from .utils import (
    from_dynamodb,
    to_dynamodb,
    utc_now,
    to_iso,
    parse_timestamp,
    month_start,
    shift_months,
)

__all__ = [
    # Cache
    'compute_data_hash',
    'clear_all_caches',
    'cached_data_loader',
    # Config
    'CUSTOMERS',
    'PRODUCTS',
    'TRANSACTIONS',
    'COLLECTIONS',
    'COLLECTION_KEYS',
    'PRODUCT_CATEGORIES',
    'FOOTWEAR_CATEGORIES',
    'COMMON_SIZES',
    'AppConfig',
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
    'format_month',
    # Utils
    'from_dynamodb',
    'to_dynamodb',
    'utc_now',
    'to_iso',
    'parse_timestamp',
    'month_start',
    'shift_months',
]
