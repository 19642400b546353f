"""
Visualization components for the storefront admin dashboard.
"""

from typing import List

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from ..core.formatting import CURRENCY_SYMBOLS
from ..data.models import MonthlyRevenue, TopProduct


def _empty_figure(message: str = "No data available") -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(text=message, x=0.5, y=0.5, showarrow=False)
    return fig


def plot_monthly_revenue(monthly: List[MonthlyRevenue], currency: str = "GHS") -> go.Figure:
    """
    Create the revenue overview chart.

    Args:
        monthly: Buckets from AnalyticsEngine.monthly_revenue, oldest first
        currency: Currency code used in the hover label

    Returns:
        Plotly bar chart with one bar per month
    """
    if not monthly:
        return _empty_figure()

    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    df = pd.DataFrame([{'Month': m.month, 'Revenue': m.revenue} for m in monthly])

    fig = go.Figure(
        go.Bar(
            x=df['Month'],
            y=df['Revenue'],
            name='Revenue',
            marker_color='steelblue',
            hovertemplate=f'<b>%{{x}}</b><br>Revenue: {symbol}%{{y:,.2f}}<extra></extra>'
        )
    )
    fig.update_layout(
        title='Revenue Overview',
        height=400,
        yaxis_title=f'Revenue ({symbol})',
        hovermode='x unified'
    )
    return fig


def plot_top_products(products: List[TopProduct], currency: str = "GHS") -> go.Figure:
    """
    Create top products visualization.

    Args:
        products: Ranked products from AnalyticsEngine.top_products
        currency: Currency code used in the axis title

    Returns:
        Plotly horizontal bar chart, best seller on top
    """
    if not products:
        return _empty_figure("No sales yet")

    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    df = pd.DataFrame([
        {'Product': p.name, 'Revenue': p.revenue, 'Units Sold': p.quantity}
        for p in products
    ])

    fig = px.bar(
        df.iloc[::-1],
        x='Revenue',
        y='Product',
        orientation='h',
        hover_data=['Units Sold'],
        title='Top Products',
        labels={'Revenue': f'Revenue ({symbol})'}
    )
    fig.update_layout(height=350)
    return fig
