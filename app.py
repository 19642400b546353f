"""
Storefront Admin Dashboard
Store administration for a small online clothing and footwear shop.
Features: revenue overview, product catalogue with image uploads,
customer activity and transaction status management.
"""

import logging

import streamlit as st

from storefront_admin import (
    AppConfig,
    DocumentStore,
    BlobStorage,
    TransactionService,
    CustomerService,
    ProductService,
    ProductInput,
    ImageUpload,
    load_overview,
    AnalyticsEngine,
    StorefrontError,
    ValidationError,
    PRODUCT_CATEGORIES,
    cached_data_loader,
    clear_all_caches,
    format_currency,
    format_number,
    format_percentage,
    format_transaction_id,
    format_date,
    plot_monthly_revenue,
    plot_top_products,
    customers_frame,
    transactions_frame,
    products_frame,
    filter_frame,
    sort_frame,
    paginate_frame,
)
from storefront_admin.core.config import COMMON_SIZES, FOOTWEAR_CATEGORIES
from storefront_admin.data.models import COMPLETED, PENDING, CANCELLED
from storefront_admin.data.products import ALLOWED_IMAGE_TYPES
from storefront_admin.ui.tables import CUSTOMER_STATUS_COLORS, status_color

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)

# =============================================================================
# CONFIGURATION
# =============================================================================

st.set_page_config(
    page_title="Storefront Admin",
    page_icon="🛍️",
    layout="wide",
    initial_sidebar_state="expanded"
)

PAGES = [
    "📊 Overview",
    "👕 Products",
    "➕ Add Product",
    "👥 Customers",
    "💳 Transactions",
]


@st.cache_resource
def get_services():
    """Build the store, storage and services once per server process."""
    config = AppConfig.load()
    store = DocumentStore(config)
    storage = BlobStorage(config)
    transactions = TransactionService(store)
    return {
        'config': config,
        'store': store,
        'storage': storage,
        'transactions': transactions,
        'customers': CustomerService(store, transactions),
        'products': ProductService(store, storage),
    }


@cached_data_loader(ttl_seconds=300)
def cached_overview(_store):
    return load_overview(_store)


@cached_data_loader(ttl_seconds=300)
def cached_customer_summaries(_customers):
    return _customers.list_customer_summaries()


def render_error(error: Exception, key: str) -> None:
    """Show a load failure with a retry button."""
    st.error(f"❌ {error}")
    if st.button("🔄 Retry", key=f"retry_{key}"):
        clear_all_caches()
        st.rerun()


def render_pagination(total_pages: int, key: str) -> int:
    if total_pages <= 1:
        return 1
    return int(st.number_input(
        f"Page (of {total_pages})", min_value=1, max_value=total_pages, value=1, key=key
    ))


# =============================================================================
# PAGES
# =============================================================================

def render_overview(services) -> None:
    """Headline metrics, revenue chart, top products and recent orders."""
    st.header("📊 Overview")
    currency = services['config'].currency

    try:
        with st.spinner("Loading dashboard..."):
            overview = cached_overview(services['store'])
    except StorefrontError as e:
        render_error(e, "overview")
        return

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric(
            "Total Revenue",
            format_currency(overview.total_revenue, currency),
            format_percentage(overview.revenue_growth)
        )
    with col2:
        st.metric(
            "Customers",
            format_number(overview.total_customers),
            format_percentage(overview.customer_growth)
        )
    with col3:
        st.metric("Products", format_number(overview.total_products))
    with col4:
        st.metric("Completed Orders", format_number(overview.total_transactions))

    st.markdown("---")

    col1, col2 = st.columns([3, 2])
    with col1:
        st.plotly_chart(plot_monthly_revenue(overview.monthly_revenue, currency), use_container_width=True)
    with col2:
        st.plotly_chart(plot_top_products(overview.top_products, currency), use_container_width=True)
        render_product_stats(overview.top_products, currency)

    st.subheader("Recent Transactions")
    if not overview.recent_transactions:
        st.info("No completed transactions yet.")
        return

    df = transactions_frame(overview.recent_transactions)
    df['total'] = df['total'].apply(lambda v: format_currency(v, currency))
    df['created_at'] = df['created_at'].apply(format_date)
    st.dataframe(
        df[['reference', 'customer_name', 'items', 'total', 'status', 'created_at']],
        use_container_width=True,
        hide_index=True
    )


def render_product_stats(top_products, currency: str) -> None:
    """Totals for the top products and each one's share of the best seller."""
    if not top_products:
        return

    stats = AnalyticsEngine.product_stats(top_products)
    st.metric("Units Sold", format_number(stats['total_quantity']))
    st.metric("Top Products Revenue", format_currency(stats['total_revenue'], currency))

    for product, share in stats['shares']:
        st.caption(f"{product.name} · {format_currency(product.revenue, currency)}")
        st.progress(min(share, 100.0) / 100)


def render_products(services) -> None:
    st.header("👕 Products")
    currency = services['config'].currency

    try:
        products = services['products'].get_all_products()
    except StorefrontError as e:
        render_error(e, "products")
        return

    if not products:
        st.info("No products yet. Use **Add Product** to create one.")
        return

    col1, col2 = st.columns([2, 1])
    with col1:
        query = st.text_input("Search products", key="product_search")
    with col2:
        category = st.selectbox("Category", ["All"] + PRODUCT_CATEGORIES, key="product_category")

    df = products_frame(products)
    if category != "All":
        df = df[df['category'] == category]
    df = filter_frame(df, query, ['name', 'category'])

    page = render_pagination(paginate_frame(df)[1], "product_page")
    rows, _ = paginate_frame(df, page)

    for _, row in rows.iterrows():
        with st.container(border=True):
            col1, col2 = st.columns([1, 4])
            with col1:
                if row['image']:
                    st.image(row['image'], width=120)
            with col2:
                st.markdown(f"**{row['name']}** · {row['category']}")
                st.markdown(
                    f"{format_currency(row['price'] or 0, currency)} · "
                    f"{row['quantity']} in stock ({row['stock']})"
                )
                if row['sizes']:
                    st.caption(f"Sizes: {row['sizes']}")


def render_add_product(services) -> None:
    """Product form with image upload."""
    st.header("➕ Add Product")

    if not services['storage'].is_configured():
        st.warning(f"⚠️ Image storage unavailable: {services['storage'].connection_error}")

    with st.form("add_product", clear_on_submit=True):
        name = st.text_input("Product name")
        col1, col2 = st.columns(2)
        with col1:
            price = st.text_input("Price")
        with col2:
            quantity = st.text_input("Quantity")
        category = st.selectbox("Category", PRODUCT_CATEGORIES)
        description = st.text_area("Description")
        size_options = COMMON_SIZES['footwear'] if category in FOOTWEAR_CATEGORIES else COMMON_SIZES['apparel']
        sizes = st.multiselect("Sizes", size_options)
        uploads = st.file_uploader(
            "Images",
            type=[t.split('/')[1] for t in ALLOWED_IMAGE_TYPES],
            accept_multiple_files=True
        )
        submitted = st.form_submit_button("Create Product", type="primary")

    if not submitted:
        return

    data = ProductInput(
        name=name,
        price=price,
        description=description,
        category=category,
        sizes=sizes,
        quantity=quantity,
        images=[ImageUpload(f.name, f, f.type) for f in uploads or []],
    )

    try:
        with st.spinner("Uploading images and saving product..."):
            product_id = services['products'].create_product(data)
    except ValidationError as e:
        for error in e.errors:
            st.error(error)
        return
    except StorefrontError as e:
        st.error(f"❌ Failed to create product: {e}")
        return

    clear_all_caches()
    st.success(f"✅ Created product {product_id}")


def render_customers(services) -> None:
    """Customer table with derived activity status."""
    st.header("👥 Customers")
    currency = services['config'].currency

    try:
        with st.spinner("Loading customers..."):
            summaries = cached_customer_summaries(services['customers'])
    except StorefrontError as e:
        render_error(e, "customers")
        return

    if not summaries:
        st.info("No customers yet.")
        return

    df = customers_frame(summaries)

    col1, col2, col3 = st.columns(3)
    for col, status in zip((col1, col2, col3), CUSTOMER_STATUS_COLORS):
        with col:
            st.metric(f"{status} Customers", int((df['status'] == status).sum()))

    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        query = st.text_input("Search by name or email", key="customer_search")
    with col2:
        sort_field = st.selectbox(
            "Sort by", ['total_spent', 'orders', 'name', 'joined_at', 'last_order_date'],
            key="customer_sort"
        )
    with col3:
        ascending = st.radio("Order", ["Descending", "Ascending"], key="customer_order") == "Ascending"

    df = filter_frame(df, query, ['name', 'email'])
    df = sort_frame(df, sort_field, ascending)

    page = render_pagination(paginate_frame(df)[1], "customer_page")
    rows, _ = paginate_frame(df, page)

    display = rows.copy()
    display['total_spent'] = display['total_spent'].apply(lambda v: format_currency(v, currency))
    display['joined_at'] = display['joined_at'].apply(lambda v: format_date(v, with_time=False))
    display['last_order_date'] = display['last_order_date'].apply(format_date)
    st.dataframe(
        display[['name', 'email', 'phone', 'location', 'orders', 'total_spent',
                 'status', 'joined_at', 'last_order_date']],
        use_container_width=True,
        hide_index=True
    )


def render_transactions(services) -> None:
    """Transaction list with status actions."""
    st.header("💳 Transactions")
    currency = services['config'].currency
    transactions_service = services['transactions']

    try:
        transactions = transactions_service.get_all_transactions()
    except StorefrontError as e:
        render_error(e, "transactions")
        return

    if not transactions:
        st.info("No transactions yet.")
        return

    col1, col2 = st.columns([2, 1])
    with col1:
        query = st.text_input("Search by customer or reference", key="transaction_search")
    with col2:
        status_filter = st.selectbox("Status", ["All", COMPLETED, PENDING, CANCELLED], key="transaction_status")

    df = transactions_frame(transactions)
    if status_filter != "All":
        df = df[df['status'] == status_filter]
    df = filter_frame(df, query, ['customer_name', 'customer_email', 'reference'])

    page = render_pagination(paginate_frame(df)[1], "transaction_page")
    rows, _ = paginate_frame(df, page)

    for _, row in rows.iterrows():
        with st.container(border=True):
            col1, col2, col3 = st.columns([3, 2, 2])
            with col1:
                st.markdown(f"**{format_transaction_id(row['id'])}** · {row['customer_name']}")
                st.caption(f"{row['customer_email']} · {format_date(row['created_at'])}")
            with col2:
                st.markdown(f"{format_currency(row['total'], currency)} · {row['items']} items")
                st.markdown(f":{status_color(row['status'])}[{row['status']}]")
            with col3:
                if row['status'] == PENDING:
                    if st.button("✅ Complete", key=f"complete_{row['id']}"):
                        update_status(transactions_service.complete_transaction, row['id'])
                    if st.button("✖️ Cancel", key=f"cancel_{row['id']}"):
                        update_status(transactions_service.cancel_transaction, row['id'])


def update_status(action, transaction_id: str) -> None:
    try:
        action(transaction_id)
    except StorefrontError as e:
        st.error(f"❌ {e}")
        return
    clear_all_caches()
    st.rerun()


# =============================================================================
# MAIN
# =============================================================================

def main():
    """Main application entry point."""
    services = get_services()

    with st.sidebar:
        st.markdown("### 🛍️ Storefront Admin")
        st.markdown("---")
        page = st.radio("Navigation", PAGES)
        st.markdown("---")
        if st.button("🔄 Refresh Data"):
            clear_all_caches()
            st.rerun()

    if page == "📊 Overview":
        render_overview(services)

    elif page == "👕 Products":
        render_products(services)

    elif page == "➕ Add Product":
        render_add_product(services)

    elif page == "👥 Customers":
        render_customers(services)

    elif page == "💳 Transactions":
        render_transactions(services)


if __name__ == "__main__":
    main()
