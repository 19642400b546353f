from datetime import datetime, timezone

import pytest

from storefront_admin.core.config import CUSTOMERS, PRODUCTS, TRANSACTIONS
from storefront_admin.core.exceptions import DataStoreError
from storefront_admin.data.overview import load_overview

NOW = datetime(2026, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def shop(seed):
    seed(CUSTOMERS, {
        'ama@example.com': {'fullName': 'Ama', 'createdAt': '2026-03-02T00:00:00.000Z'},
        'kofi@example.com': {'fullName': 'Kofi', 'createdAt': '2026-04-10T00:00:00.000Z'},
        'esi@example.com': {'fullName': 'Esi', 'createdAt': '2026-04-22T00:00:00.000Z'},
    })
    seed(PRODUCTS, {
        'p1': {'name': 'Runner', 'isActive': True},
        'p2': {'name': 'Tee', 'isActive': True},
    })
    seed(TRANSACTIONS, {
        't1': {'status': 'success', 'total': 200, 'createdAt': '2026-03-05T10:00:00.000Z',
               'cartItems': [{'productId': 'p1', 'productName': 'Runner', 'quantity': 1, 'price': 200}]},
        't2': {'status': 'completed', 'amount': 300, 'createdAt': '2026-04-05T10:00:00.000Z',
               'products': [{'productId': 'p2', 'productName': 'Tee', 'quantity': 3, 'price': 100}]},
        't3': {'status': 'pending', 'total': 999, 'createdAt': '2026-05-01T10:00:00.000Z',
               'cartItems': [{'productId': 'p1', 'productName': 'Runner', 'quantity': 5, 'price': 200}]},
        't4': {'status': 'failed', 'total': 50, 'createdAt': '2026-05-02T10:00:00.000Z'},
        'broken': {'cartItems': 7, 'status': 'completed', 'createdAt': '2026-05-03T10:00:00.000Z'},
    })


def test_overview_aggregates_completed_transactions(store, shop):
    overview = load_overview(store, NOW)

    assert overview.total_revenue == 500
    assert overview.total_customers == 3
    assert overview.total_products == 2
    assert overview.total_transactions == 2
    assert overview.revenue_growth == 50.0
    assert overview.customer_growth == 100.0

    assert [m.revenue for m in overview.monthly_revenue] == [0, 0, 0, 200, 300, 0]
    assert [(p.product_id, p.revenue) for p in overview.top_products] == [('p2', 300), ('p1', 200)]


def test_recent_transactions_are_completed_newest_first(store, shop):
    overview = load_overview(store, NOW)

    # The malformed document matches the status filter but is skipped on normalization
    assert [t.id for t in overview.recent_transactions] == ['t2', 't1']
    assert all(t.status == 'completed' for t in overview.recent_transactions)


def test_empty_store_gives_zero_filled_dashboard(store):
    overview = load_overview(store, NOW)

    assert overview.total_revenue == 0
    assert len(overview.monthly_revenue) == 6
    assert all(m.revenue == 0 for m in overview.monthly_revenue)
    assert overview.top_products == []
    assert overview.recent_transactions == []


def test_failed_read_surfaces_as_one_error(store, dynamodb, shop):
    dynamodb.table(PRODUCTS).fail_with = 'InternalServerError'

    with pytest.raises(DataStoreError):
        load_overview(store, NOW)
