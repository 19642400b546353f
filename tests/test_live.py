import threading

from storefront_admin.core.config import PRODUCTS, TRANSACTIONS
from storefront_admin.data.live import LiveFeed
from storefront_admin.data.transactions import TransactionService


def test_poll_once_notifies_only_on_change():
    snapshots = [[{'id': 'a'}], [{'id': 'a'}], [{'id': 'a'}, {'id': 'b'}]]
    received = []
    feed = LiveFeed(lambda: snapshots.pop(0), received.append)

    assert feed.poll_once() is True
    assert feed.poll_once() is False
    assert feed.poll_once() is True
    assert received == [[{'id': 'a'}], [{'id': 'a'}, {'id': 'b'}]]


def test_fetch_errors_go_to_on_error():
    errors = []

    def fetch():
        raise RuntimeError('offline')

    feed = LiveFeed(fetch, lambda snapshot: None, on_error=errors.append)

    assert feed.poll_once() is False
    assert [str(e) for e in errors] == ['offline']


def test_stopped_feed_does_not_notify():
    received = []
    feed = LiveFeed(lambda: [1], received.append)
    feed.stop()

    assert feed.poll_once() is False
    assert received == []


def test_background_thread_delivers_and_stops():
    delivered = threading.Event()
    feed = LiveFeed(lambda: ['snapshot'], lambda snapshot: delivered.set(), interval=0.01)

    feed.start()
    assert delivered.wait(2)
    assert feed.running

    feed.stop(timeout=2)
    assert not feed.running


def test_store_subscription_and_unsubscribe(store, seed):
    seed(PRODUCTS, {'p1': {'name': 'Runner', 'createdAt': '2026-05-01T00:00:00Z'}})
    received = threading.Event()
    snapshots = []

    def on_snapshot(documents):
        snapshots.append(documents)
        received.set()

    unsubscribe = store.subscribe(PRODUCTS, on_snapshot, interval=0.01)
    assert received.wait(2)
    unsubscribe()

    assert [d['id'] for d in snapshots[0]] == ['p1']
    assert store._feeds == []


def test_transaction_subscription_normalizes(store, seed):
    seed(TRANSACTIONS, {
        't1': {'status': 'success', 'total': 10, 'createdAt': '2026-05-01T00:00:00Z'},
        't2': {'status': 'pending', 'total': 5, 'createdAt': '2026-05-02T00:00:00Z'},
    })
    received = threading.Event()
    batches = []

    def on_transactions(transactions):
        batches.append(transactions)
        received.set()

    unsubscribe = TransactionService(store).subscribe(on_transactions, interval=0.01)
    assert received.wait(2)
    unsubscribe()

    assert [(t.id, t.status) for t in batches[0]] == [('t2', 'pending'), ('t1', 'completed')]
