"""
Application configuration and constants.
"""

from dataclasses import dataclass
from typing import Optional
import os


# Collections backing the admin pages. Each maps to a DynamoDB table
# named "<table_prefix>-<collection>".
CUSTOMERS = "customers"
PRODUCTS = "products"
TRANSACTIONS = "transactions"

COLLECTIONS = [CUSTOMERS, PRODUCTS, TRANSACTIONS]

# Key attribute per collection. Customers are keyed by their email.
COLLECTION_KEYS = {
    CUSTOMERS: "email",
    PRODUCTS: "id",
    TRANSACTIONS: "id",
}

PRODUCT_CATEGORIES = ["Sneakers", "Slides", "Boots", "T-Shirts", "Hoodies", "Accessories"]
FOOTWEAR_CATEGORIES = ["Sneakers", "Slides", "Boots"]

COMMON_SIZES = {
    "footwear": ["38", "39", "40", "41", "42", "43", "44", "45"],
    "apparel": ["XS", "S", "M", "L", "XL", "XXL"],
}


@dataclass
class AppConfig:
    """Application configuration settings."""

    # AWS Settings
    aws_access_key: Optional[str] = None
    aws_secret_key: Optional[str] = None
    aws_region: str = "us-west-2"
    s3_bucket: Optional[str] = None
    table_prefix: str = "storefront"

    # Display
    currency: str = "GHS"

    # Cache Settings
    cache_ttl_seconds: int = 300  # 5 minutes

    # Storage Settings
    presigned_url_expiry: int = 7 * 24 * 3600  # 7 days, the S3 maximum

    # Live updates
    live_poll_interval: float = 5.0

    # None means one worker per customer
    customer_stats_workers: Optional[int] = None

    def table_name(self, collection: str) -> str:
        """DynamoDB table name for a collection."""
        return f"{self.table_prefix}-{collection}"

    @classmethod
    def from_environment(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        return cls(
            aws_access_key=os.environ.get("AWS_ACCESS_KEY_ID"),
            aws_secret_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
            aws_region=os.environ.get("AWS_DEFAULT_REGION", "us-west-2"),
            s3_bucket=os.environ.get("S3_BUCKET_NAME"),
            table_prefix=os.environ.get("STOREFRONT_TABLE_PREFIX", "storefront"),
            currency=os.environ.get("STOREFRONT_CURRENCY", "GHS"),
        )

    @classmethod
    def from_streamlit_secrets(cls) -> 'AppConfig':
        """Load configuration from Streamlit secrets."""
        try:
            import streamlit as st

            aws_secrets = st.secrets.get("aws", {})
            storefront = st.secrets.get("storefront", {})
            return cls(
                aws_access_key=aws_secrets.get("access_key_id"),
                aws_secret_key=aws_secrets.get("secret_access_key"),
                aws_region=aws_secrets.get("region", "us-west-2"),
                s3_bucket=aws_secrets.get("bucket_name"),
                table_prefix=storefront.get("table_prefix", "storefront"),
                currency=storefront.get("currency", "GHS"),
            )
        except Exception:
            return cls()

    @classmethod
    def load(cls) -> 'AppConfig':
        """Load configuration from environment first, then Streamlit secrets as fallback."""
        config = cls.from_environment()

        # Fill in missing values from Streamlit secrets
        st_config = cls.from_streamlit_secrets()

        if not config.aws_access_key:
            config.aws_access_key = st_config.aws_access_key
        if not config.aws_secret_key:
            config.aws_secret_key = st_config.aws_secret_key
        if not config.s3_bucket:
            config.s3_bucket = st_config.s3_bucket
        if "STOREFRONT_TABLE_PREFIX" not in os.environ:
            config.table_prefix = st_config.table_prefix
        if "STOREFRONT_CURRENCY" not in os.environ:
            config.currency = st_config.currency

        return config
