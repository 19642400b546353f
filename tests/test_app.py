import pytest

import app
from storefront_admin.data.models import TopProduct


class RecordingStreamlit:
    """Stands in for the streamlit module and records each element drawn."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def element(*args, **kwargs):
            self.calls.append((name,) + args)
        return element


@pytest.fixture
def page(monkeypatch):
    recorder = RecordingStreamlit()
    monkeypatch.setattr(app, 'st', recorder)
    return recorder


def test_product_stats_card(page):
    app.render_product_stats(
        [TopProduct('p1', 'Runner', 3, 400), TopProduct('p2', 'Tee', 2, 100)], 'GHS'
    )

    assert page.calls == [
        ('metric', 'Units Sold', '5'),
        ('metric', 'Top Products Revenue', '₵500'),
        ('caption', 'Runner · ₵400'),
        ('progress', 1.0),
        ('caption', 'Tee · ₵100'),
        ('progress', 0.25),
    ]


def test_product_stats_card_without_sales(page):
    app.render_product_stats([], 'GHS')
    assert page.calls == []
