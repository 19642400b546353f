"""
Caching utilities for the storefront admin dashboard.
Provides hash-based change detection and Streamlit cache helpers.
"""

import hashlib
import json
from typing import Any

import streamlit as st


def compute_data_hash(data: Any) -> str:
    """
    Compute a hash of the data for change detection.

    Args:
        data: Any JSON-serializable data structure

    Returns:
        16-character MD5 hash string
    """
    json_str = json.dumps(data, sort_keys=True, default=str)
    return hashlib.md5(json_str.encode()).hexdigest()[:16]


def clear_all_caches() -> None:
    """
    Clear all Streamlit data caches.
    Call this when user requests a manual refresh.
    """
    st.cache_data.clear()


def cached_data_loader(ttl_seconds: int = 300):
    """
    Decorator factory for cached data loading functions.

    Arguments whose names start with an underscore (store handles, clients)
    are left out of the cache key.

    Usage:
        @cached_data_loader(ttl_seconds=300)
        def load_my_data(_store, hash_key: str):
            return expensive_operation()
    """
    def decorator(func):
        return st.cache_data(ttl=ttl_seconds, show_spinner=False)(func)

    return decorator
