"""
Streamlit Frontend for MoneyFlow

This is the user interface for logging transactions and checking how
much is safe to spend today.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every number on screen is recomputed from the transaction list
3. Clear error messages in simple language
4. Destructive actions need explicit confirmation
5. AI commentary is optional; its failure is only a notice
"""

import asyncio
from datetime import date
from decimal import Decimal

import plotly.express as px
import streamlit as st

from moneyflow.agents import Sentiment
from moneyflow.config import validate_all_settings
from moneyflow.engine import (
    AllocationPreset,
    matching_preset,
    per_day_preview,
    resolve_allocation,
)
from moneyflow.formatting import (
    amount_suggestions,
    format_currency,
    insight_html,
    swatch_line_html,
)
from moneyflow.models import CATEGORY_COLORS, TransactionDraft, TransactionType, next_category_color
from moneyflow.orchestrator import (
    BookkeepingFlow,
    CommentaryFlow,
    create_app_components,
)
from moneyflow.queries import (
    TypeFilter,
    category_label,
    category_list_color,
    filter_transactions,
    group_by_date,
)
from moneyflow.services.storage import StorageError
from moneyflow.state import ConfirmationRequiredError, StateManager


# Page configuration
st.set_page_config(
    page_title="MoneyFlow",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .good-box {
        padding: 16px;
        background-color: #d1fae5;
        border-radius: 10px;
        border-left: 5px solid #10b981;
        margin: 10px 0;
    }
    .warning-box {
        padding: 16px;
        background-color: #fef3c7;
        border-radius: 10px;
        border-left: 5px solid #f59e0b;
        margin: 10px 0;
    }
    .critical-box {
        padding: 16px;
        background-color: #fee2e2;
        border-radius: 10px;
        border-left: 5px solid #ef4444;
        margin: 10px 0;
    }
    .swatch {
        display: inline-block;
        width: 12px;
        height: 12px;
        border-radius: 6px;
        margin-right: 6px;
    }
</style>
""", unsafe_allow_html=True)

SENTIMENT_BOX = {
    Sentiment.GOOD: ("good-box", "✅"),
    Sentiment.WARNING: ("warning-box", "⚠️"),
    Sentiment.CRITICAL: ("critical-box", "🚨"),
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Could not open local storage, data will not be saved: {e}")
        return create_app_components(use_storage=False)


def main():
    """Main application entry point."""
    state_manager, bookkeeping, commentary = get_components()

    st.sidebar.title("💰 MoneyFlow")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Tổng quan", "➕ Thêm giao dịch", "🕘 Lịch sử", "⚙️ Cài đặt"],
        index=0,
    )

    if page == "📊 Tổng quan":
        render_dashboard_page(state_manager, commentary)
    elif page == "➕ Thêm giao dịch":
        render_add_page(state_manager, bookkeeping)
    elif page == "🕘 Lịch sử":
        render_history_page(state_manager, bookkeeping)
    elif page == "⚙️ Cài đặt":
        render_settings_page(state_manager)


def render_dashboard_page(state_manager: StateManager, commentary: CommentaryFlow):
    """Monthly totals, today's safe-to-spend and the category chart."""
    st.title("📊 Tổng quan")

    today = date.today()
    snapshot = state_manager.dashboard(today)
    currency = state_manager.state.settings.currency
    summary = snapshot.summary

    col1, col2, col3 = st.columns(3)
    col1.metric("Thu nhập", format_currency(summary.total_income, currency))
    col2.metric("Chi tiêu", format_currency(summary.total_expense, currency))
    col3.metric("Số dư", format_currency(summary.balance, currency))

    if state_manager.state.settings.daily_limit_enabled:
        st.markdown("### 🗓️ Hạn mức hôm nay")
        st.caption(f"Còn {snapshot.days_remaining} ngày trong tháng")

        col1, col2 = st.columns(2)
        col1.metric("Có thể chi mỗi ngày", format_currency(snapshot.daily_limit, currency))
        col2.metric("Đã phân bổ hôm nay", format_currency(snapshot.amortized_daily_burn, currency))
        st.progress(snapshot.burn_ratio)

        if snapshot.is_over_daily_limit:
            st.error("Chi phí phân bổ hôm nay đã vượt hạn mức an toàn.")
        else:
            st.success("Bạn vẫn đang trong hạn mức an toàn hôm nay.")

    st.markdown("### 🥧 Chi tiêu theo danh mục")
    if snapshot.chart:
        fig = px.pie(
            names=[s.name for s in snapshot.chart],
            values=[float(s.amount) for s in snapshot.chart],
            color=[s.name for s in snapshot.chart],
            color_discrete_map={s.name: s.color for s in snapshot.chart},
            hole=0.5,
        )
        fig.update_layout(margin=dict(t=10, b=10, l=10, r=10), showlegend=True)
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("Chưa có khoản chi nào trong tháng này.")

    over_budget = [b for b in snapshot.budgets if b.is_over_budget]
    if over_budget:
        with st.expander(f"⚠️ {len(over_budget)} danh mục vượt ngân sách"):
            for usage in over_budget:
                st.markdown(
                    f"**{usage.category_name}**: "
                    f"{format_currency(usage.spent, currency)} / "
                    f"{format_currency(usage.budget, currency)}"
                )

    st.markdown("### ✨ Nhận xét từ AI")
    if st.button("Phân tích chi tiêu", type="primary"):
        with st.spinner("Đang phân tích..."):
            st.session_state.insight = run_async(commentary.request(today))

    insight = st.session_state.get("insight")
    if insight:
        css_class, icon = SENTIMENT_BOX[insight.sentiment]
        st.markdown(
            insight_html(css_class, icon, insight.title, insight.message, insight.action_item),
            unsafe_allow_html=True,
        )


def render_add_page(state_manager: StateManager, bookkeeping: BookkeepingFlow):
    """Add-transaction form with allocation presets."""
    st.title("➕ Thêm giao dịch")
    categories = list(state_manager.state.categories)

    tx_type = st.radio(
        "Loại",
        options=[TransactionType.EXPENSE, TransactionType.INCOME],
        format_func=lambda t: "Chi tiêu" if t == TransactionType.EXPENSE else "Thu nhập",
        horizontal=True,
    )

    amount = st.number_input("Số tiền", min_value=0.0, step=1000.0, format="%.0f")
    suggestions = amount_suggestions(Decimal(str(amount)))
    if suggestions:
        st.caption("Gợi ý: " + " · ".join(format_currency(s) for s in suggestions))

    tx_date = st.date_input("Ngày", value=date.today())

    of_type = [c for c in categories if c.type == tx_type]
    category = st.selectbox(
        "Danh mục",
        options=of_type,
        format_func=lambda c: c.name,
    ) if of_type else None

    note = st.text_input("Ghi chú (không bắt buộc)")

    allocation_days = 1
    if tx_type == TransactionType.EXPENSE:
        st.markdown("**Phân bổ chi phí**")
        st.caption("Chia nhỏ chi phí này cho nhiều ngày để tính hạn mức chi tiêu mỗi ngày chính xác hơn.")
        preset = st.radio(
            "Phân bổ",
            options=list(AllocationPreset),
            format_func=lambda p: p.label,
            horizontal=True,
            label_visibility="collapsed",
        )
        custom = None
        if preset == AllocationPreset.CUSTOM:
            custom = st.number_input("Số ngày", min_value=1, max_value=365, value=1, step=1)
        allocation_days = resolve_allocation(preset, tx_date, custom)

        preview = per_day_preview(Decimal(str(amount)), allocation_days)
        if preview is not None:
            st.caption(f"~ {format_currency(preview)} / ngày trong {allocation_days} ngày")
        if preset == AllocationPreset.CUSTOM and matching_preset(allocation_days, tx_date):
            st.caption(f"(trùng với lựa chọn {matching_preset(allocation_days, tx_date).label})")

    if st.button("✅ Lưu giao dịch", type="primary"):
        draft = TransactionDraft(
            amount=Decimal(str(amount)),
            type=tx_type,
            category_id=category.id if category else None,
            date=tx_date,
            note=note or None,
            allocation_duration=allocation_days,
        )
        try:
            validation, new_state = bookkeeping.submit(draft, date.today())
        except StorageError as e:
            st.error(f"Không lưu được giao dịch: {e}")
            return

        for warning in validation.warnings:
            st.warning(warning)
        if new_state is None:
            for issue in validation.issues:
                if issue.severity == "error":
                    st.error(issue.message)
        else:
            st.success("Đã lưu giao dịch.")


def render_history_page(state_manager: StateManager, bookkeeping: BookkeepingFlow):
    """Searchable, grouped transaction list with delete."""
    st.title("🕘 Lịch sử")
    state = state_manager.state
    categories = list(state.categories)
    currency = state.settings.currency

    search = st.text_input("Tìm kiếm", placeholder="Ghi chú hoặc danh mục...")
    type_filter = st.radio(
        "Loại",
        options=list(TypeFilter),
        format_func=lambda f: {"ALL": "Tất cả", "EXPENSE": "Chi tiêu", "INCOME": "Thu nhập"}[f.value],
        horizontal=True,
    )

    filtered = filter_transactions(state.transactions, categories, search, type_filter)
    if not filtered:
        st.info("Không có giao dịch nào.")
        return

    for day, items in group_by_date(filtered).items():
        st.markdown(f"#### {day.strftime('%d/%m/%Y')}")
        for t in items:
            col1, col2 = st.columns([5, 1])
            sign = "+" if t.type == TransactionType.INCOME else "-"
            color = category_list_color(t.category_id, categories)
            allocation = (
                f" · phân bổ {t.effective_duration} ngày"
                if t.is_expense and t.effective_duration > 1 else ""
            )
            col1.markdown(
                swatch_line_html(
                    color,
                    category_label(t.category_id, categories),
                    f"{sign}{format_currency(t.amount, currency)}{allocation}",
                    t.note,
                ),
                unsafe_allow_html=True,
            )
            if col2.button("🗑️", key=f"delete-{t.id}"):
                try:
                    bookkeeping.delete(t.id)
                except StorageError as e:
                    st.error(f"Không xóa được: {e}")
                else:
                    st.rerun()


def render_settings_page(state_manager: StateManager):
    """Preferences, service status and the clear-all action."""
    st.title("⚙️ Cài đặt")
    settings = state_manager.state.settings

    dark_mode = st.toggle("Chế độ tối", value=settings.dark_mode)
    daily_limit_enabled = st.toggle("Hiển thị hạn mức hàng ngày", value=settings.daily_limit_enabled)

    st.markdown("### 📄 Google Sheets")
    st.caption(
        "Lưu ý: dữ liệu được lưu trên máy. Trường ID Google Sheet chỉ để mô phỏng, "
        "chưa có đồng bộ thật."
    )
    sheet_id = st.text_input("Google Sheet ID", value=settings.google_sheet_id or "")

    if st.button("💾 Lưu cài đặt"):
        try:
            state_manager.update_settings(
                dark_mode=dark_mode,
                daily_limit_enabled=daily_limit_enabled,
                google_sheet_id=sheet_id or None,
            )
            st.success("Đã lưu cài đặt.")
        except StorageError as e:
            st.error(f"Không lưu được cài đặt: {e}")

    st.markdown("---")
    render_category_editor(state_manager)

    st.markdown("---")
    st.markdown("### Connection Status")
    status = validate_all_settings()
    services = [
        ("Gemini (AI commentary)", "gemini"),
        ("Local storage", "storage"),
        ("App", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    st.markdown("---")
    st.markdown("### 🗑️ Xóa toàn bộ dữ liệu")
    confirmed = st.checkbox("Tôi hiểu hành động này sẽ xóa toàn bộ dữ liệu và không thể hoàn tác.")
    if st.button("Xóa dữ liệu"):
        try:
            state_manager.clear_all(confirmed=confirmed)
        except ConfirmationRequiredError:
            st.warning("Vui lòng xác nhận trước khi xóa.")
        except StorageError as e:
            st.error(f"Không xóa được dữ liệu: {e}")
        else:
            st.session_state.pop("insight", None)
            st.success("Đã xóa toàn bộ dữ liệu.")

    with st.expander("Hoạt động gần đây"):
        for event in state_manager.audit_logger.recent_events(10):
            st.text(f"{event.timestamp:%H:%M:%S} {event.event_type.value}: {event.description}")


def render_category_editor(state_manager: StateManager):
    """List categories, add one from the palette, remove one."""
    st.markdown("### 🏷️ Danh mục")
    categories = list(state_manager.state.categories)
    currency = state_manager.state.settings.currency

    for category in categories:
        col1, col2 = st.columns([5, 1])
        budget = f" · ngân sách {format_currency(category.budget, currency)}" if category.budget else ""
        kind = "Thu" if category.type == TransactionType.INCOME else "Chi"
        col1.markdown(
            swatch_line_html(category.color, category.name, f"({kind}{budget})"),
            unsafe_allow_html=True,
        )
        if col2.button("✖️", key=f"remove-category-{category.id}"):
            try:
                state_manager.remove_category(category.id)
            except StorageError as e:
                st.error(f"Không xóa được danh mục: {e}")
            else:
                st.rerun()

    with st.form("add-category", clear_on_submit=True):
        name = st.text_input("Tên danh mục mới")
        category_type = st.radio(
            "Loại",
            options=[TransactionType.EXPENSE, TransactionType.INCOME],
            format_func=lambda t: "Chi tiêu" if t == TransactionType.EXPENSE else "Thu nhập",
            horizontal=True,
        )
        budget = st.number_input("Ngân sách tháng (0 = không có)", min_value=0.0, step=100000.0, format="%.0f")
        suggested = next_category_color(categories)
        color = st.selectbox(
            "Màu",
            options=list(CATEGORY_COLORS),
            index=CATEGORY_COLORS.index(suggested),
        )
        if st.form_submit_button("➕ Thêm danh mục"):
            if not name.strip():
                st.warning("Vui lòng nhập tên danh mục.")
            else:
                try:
                    state_manager.add_category(
                        name,
                        category_type,
                        budget=Decimal(str(budget)) if budget else None,
                        color=color,
                    )
                except StorageError as e:
                    st.error(f"Không lưu được danh mục: {e}")
                else:
                    st.rerun()


if __name__ == "__main__":
    main()
