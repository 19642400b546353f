import pytest

from storefront_admin.core.exceptions import MalformedRecordError
from storefront_admin.core.utils import parse_timestamp
from storefront_admin.data.normalizer import (
    UNKNOWN_CUSTOMER,
    UNKNOWN_PRODUCT,
    normalize_status,
    normalize_transaction,
    normalize_transactions,
)


CHECKOUT_DOC = {
    'cartItems': [
        {'productId': 'p1', 'productName': 'Runner', 'quantity': 2, 'price': 150, 'size': '42'},
        {'productId': 'p2', 'productName': 'Tee', 'quantity': 1, 'price': 80.5},
    ],
    'customerData': {'fullName': 'Ama Mensah', 'email': 'ama@example.com'},
    'total': 380.5,
    'subtotal': 380.5,
    'status': 'success',
    'reference': 'PSK-123',
    'currency': 'GHS',
    'createdAt': '2026-05-02T10:00:00.000Z',
}

LEGACY_DOC = {
    'products': [{'productId': 'p3', 'productName': 'Slide', 'quantity': 1, 'price': 60}],
    'customerName': 'Kofi Boateng',
    'customerEmail': 'kofi@example.com',
    'customerId': 'cust-9',
    'amount': 60,
    'status': 'failed',
    'createdAt': '2026-03-10T08:30:00.000Z',
}


def test_checkout_schema():
    t = normalize_transaction('abc123', CHECKOUT_DOC)

    assert t.id == 'abc123'
    assert t.customer_name == 'Ama Mensah'
    assert t.customer_email == 'ama@example.com'
    assert t.customer_id == 'ama@example.com'
    assert t.total == 380.5
    assert t.status == 'completed'
    assert t.reference == 'PSK-123'
    assert [item.product_id for item in t.products] == ['p1', 'p2']
    assert t.products[0].size == '42'
    assert t.products[0].subtotal == 300


def test_legacy_schema():
    t = normalize_transaction('old1', LEGACY_DOC)

    assert t.customer_name == 'Kofi Boateng'
    assert t.customer_email == 'kofi@example.com'
    assert t.customer_id == 'cust-9'
    assert t.total == 60
    assert t.status == 'cancelled'
    assert t.products[0].product_name == 'Slide'


def test_cart_items_preferred_over_products():
    doc = dict(CHECKOUT_DOC, products=[{'productId': 'legacy', 'quantity': 1, 'price': 1}])
    t = normalize_transaction('x', doc)
    assert 'legacy' not in [item.product_id for item in t.products]


@pytest.mark.parametrize('status, expected', [
    ('success', 'completed'),
    ('failed', 'cancelled'),
    ('completed', 'completed'),
    ('pending', 'pending'),
    ('refunded', 'refunded'),
    (None, None),
])
def test_status_mapping(status, expected):
    assert normalize_status(status) == expected


def test_total_falls_back_to_amount_then_line_items():
    doc = {'products': [{'productId': 'p', 'quantity': 3, 'price': 20}], 'status': 'completed',
           'createdAt': '2026-05-01T00:00:00Z'}
    assert normalize_transaction('a', dict(doc, amount=55)).total == 55
    assert normalize_transaction('b', doc).total == 60


def test_explicit_zero_total_is_kept():
    items = [{'productId': 'p', 'quantity': 2, 'price': 50}]
    t = normalize_transaction('free', {'total': 0, 'cartItems': items, 'createdAt': '2026-05-01T00:00:00Z'})
    assert t.total == 0

    t = normalize_transaction('comp', {'amount': 0, 'products': items, 'createdAt': '2026-05-01T00:00:00Z'})
    assert t.total == 0


def test_missing_optional_fields_use_defaults():
    t = normalize_transaction('bare', {'status': 'pending'})

    assert t.customer_name == UNKNOWN_CUSTOMER
    assert t.customer_email == ''
    assert t.products == ()
    assert t.total == 0
    # Missing createdAt is filled with the current time
    assert parse_timestamp(t.created_at) is not None


def test_line_item_defaults():
    t = normalize_transaction('x', {'cartItems': [{'productId': 'p'}], 'createdAt': '2026-05-01'})
    item = t.products[0]
    assert item.product_name == UNKNOWN_PRODUCT
    assert item.quantity == 1
    assert item.price == 0


def test_epoch_millis_created_at_becomes_iso():
    t = normalize_transaction('x', {'createdAt': 1714000000000})
    assert t.created_at == '2024-04-24T23:06:40.000Z'


@pytest.mark.parametrize('raw', [
    'not a document',
    ['a', 'list'],
    {'cartItems': 'oops'},
    {'cartItems': ['not a mapping']},
    {'cartItems': [{'productId': 'p', 'quantity': 'many'}]},
    {'total': 'lots'},
    {'total': True},
    {'customerData': 'ama@example.com'},
    {'createdAt': 'yesterday-ish'},
    {'createdAt': 'today'},
    {'createdAt': '3 May 2026'},
])
def test_structurally_malformed_records_raise(raw):
    with pytest.raises(MalformedRecordError):
        normalize_transaction('bad', raw)


def test_batch_skips_malformed_and_keeps_the_rest(caplog):
    documents = [
        dict(CHECKOUT_DOC, id='good1'),
        {'id': 'bad', 'cartItems': 'oops'},
        dict(LEGACY_DOC, id='good2'),
    ]

    transactions = normalize_transactions(documents)

    assert [t.id for t in transactions] == ['good1', 'good2']
    assert 'Skipping transaction bad' in caplog.text
