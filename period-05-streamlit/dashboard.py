"""
dashboard.py — Period 05: Dashboard (Streamlit)
-------------------------------------------------
Streamlit page around the period controller.

Run:
  streamlit run period-05-streamlit/dashboard.py

The controller lives in st.session_state for the lifetime of the browser
session; the URL (st.query_params) and data/period_prefs.json reflect it.
"""

import sys
from datetime import date, datetime, timedelta
from pathlib import Path

import pandas as pd
import plotly.express as px
import streamlit as st

# ---------------------------------------------------------------------------
# Path Resolution
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent

for _p in [
    str(PROJECT_ROOT / "period-00-core"),
    str(PROJECT_ROOT / "period-01-calendar"),
    str(PROJECT_ROOT / "period-02-presets"),
    str(PROJECT_ROOT / "period-03-availability"),
    str(PROJECT_ROOT / "period-04-state"),
    str(Path(__file__).resolve().parent),
]:
    if _p not in sys.path:
        sys.path.insert(0, _p)

from config_loader import load_config, resolve_path  # noqa: E402
from logger import get_logger  # noqa: E402
from iso_calendar import (  # noqa: E402
    current_month,
    current_week,
    generate_weeks,
    is_current_week,
    shift_month,
    week_end,
    week_start,
    weeks_in_month,
)
from period_labels import (  # noqa: E402
    format_date_ru,
    format_date_range_ru,
    format_month_label,
    format_period_display,
    format_refresh_age,
    format_week_label,
)
from preset_engine import ComparisonPreset, calculate_legacy_preset, iso_preset  # noqa: E402
from availability import availability_message, classify_metrics  # noqa: E402
from report_schedule import last_completed_week  # noqa: E402
from period_controller import PeriodController, PeriodType  # noqa: E402
from period_ports import JsonFileKeyValueStore  # noqa: E402
from streamlit_stores import StreamlitCacheInvalidator, StreamlitQueryParamStore  # noqa: E402

INVALIDATOR = StreamlitCacheInvalidator()

_STATUS_LABELS = {
    "realtime": "✅ актуально",
    "delayed": "⏳ с задержкой",
    "pending_week": "🕒 ждёт недельного отчёта",
    "unavailable": "— недоступно",
}


# ---------------------------------------------------------------------------
# Cached loaders (cleared by the refresh button through their tags)
# ---------------------------------------------------------------------------

@INVALIDATOR.tagged("dashboard")
@st.cache_data
def load_week_options(start_week: str, count: int) -> list[str]:
    return generate_weeks(count, start_week)


@INVALIDATOR.tagged("dashboard", "analytics")
@st.cache_data
def load_preset_table(today: date) -> pd.DataFrame:
    rows = []
    for preset in (ComparisonPreset.MOM, ComparisonPreset.QOQ, ComparisonPreset.YOY):
        legacy = calculate_legacy_preset(preset, today)
        iso = iso_preset(preset, today)
        rows.append({
            "Сравнение": preset.value.upper(),
            "Период 1": format_date_range_ru(legacy.period1.date_from, legacy.period1.date_to),
            "Период 2": format_date_range_ru(legacy.period2.date_from, legacy.period2.date_to),
            "ISO период 1": iso.period1,
            "ISO период 2": iso.period2,
            "Несовпадение недель": iso.week_mismatch,
        })
    return pd.DataFrame(rows)


@INVALIDATOR.tagged("analytics")
@st.cache_data
def load_availability_table(
    metrics: tuple[str, ...],
    period: str,
    period_type: str,
    today: date,
    publish_weekday: int,
) -> pd.DataFrame:
    statuses = classify_metrics(list(metrics), period, period_type, today)
    rows = [
        {
            "Показатель": key,
            "Статус": _STATUS_LABELS[status.value],
            "Комментарий": availability_message(
                key, period, period_type, today, publish_weekday=publish_weekday
            ) or "",
        }
        for key, status in statuses.items()
    ]
    return pd.DataFrame(rows)


def build_month_timeline(month_id: str, today: date) -> pd.DataFrame:
    """One row per ISO week of the month, Monday through end of Sunday."""
    rows = []
    for week_id in weeks_in_month(month_id):
        start = week_start(week_id)
        if is_current_week(week_id, today):
            status = "текущая"
        elif start > today:
            status = "будущая"
        else:
            status = "завершена"
        rows.append({
            "Неделя": week_id,
            "Начало": start,
            "Конец": week_end(week_id) + timedelta(days=1),
            "Статус": status,
        })
    return pd.DataFrame(rows)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

def _get_controller(config: dict) -> PeriodController:
    if "period_controller" not in st.session_state:
        schedule = config["report_schedule"]
        controller = PeriodController(
            last_completed_week=lambda: last_completed_week(
                cutoff_hour=schedule["cutoff_hour"],
                publish_weekday=schedule["publish_weekday"],
            ),
            query_params=StreamlitQueryParamStore(),
            storage=JsonFileKeyValueStore(resolve_path(config["storage"]["path"])),
            invalidator=INVALIDATOR,
            storage_key=config["storage"]["key"],
            url_params=config["url_params"],
            invalidate_tags=tuple(config["refresh"]["invalidate_tags"]),
        )
        controller.initialize()
        st.session_state["period_controller"] = controller
    return st.session_state["period_controller"]


def _month_options(today: date, count: int, selected: str) -> list[str]:
    latest = current_month(today)
    options = [shift_month(latest, -i) for i in range(count)]
    if selected not in options:
        options.append(selected)
    return options


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------

def main():
    st.set_page_config(
        page_title="Dashboard Periods",
        page_icon="📅",
        layout="wide",
    )

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        st.error(f"Configuration error: {exc}")
        return

    get_logger("periods", log_dir=resolve_path(config["log_dir"]))
    controller = _get_controller(config)
    dashboard_cfg = config["dashboard"]
    today = date.today()

    # --- Sidebar: period selection ---
    st.sidebar.header("Период")
    state = controller.state
    mode = st.sidebar.radio(
        "Режим",
        [PeriodType.WEEK.value, PeriodType.MONTH.value],
        index=0 if state.period_type is PeriodType.WEEK else 1,
        format_func=lambda v: "Неделя" if v == "week" else "Месяц",
        horizontal=True,
    )
    if mode != state.period_type.value:
        controller.set_period_type(mode)

    state = controller.state
    if state.period_type is PeriodType.WEEK:
        weeks = load_week_options(current_week(today), int(dashboard_cfg["week_options"]))
        if state.selected_week not in weeks:
            weeks = weeks + [state.selected_week]
        week = st.sidebar.selectbox(
            "Неделя",
            weeks,
            index=weeks.index(state.selected_week),
            format_func=lambda w: format_week_label(w, today),
        )
        controller.set_week(week)
    else:
        months = _month_options(today, int(dashboard_cfg.get("month_options", 12)), state.selected_month)
        month = st.sidebar.selectbox(
            "Месяц",
            months,
            index=months.index(state.selected_month),
            format_func=lambda m: format_month_label(m, today),
        )
        controller.set_month(month)

    st.sidebar.markdown("---")
    if st.sidebar.button("🔄 Обновить данные", use_container_width=True):
        controller.refresh()

    # --- Header ---
    state = controller.state
    st.title(format_period_display(state.active_period, state.period_type.value, today))
    st.caption(f"Обновлено {format_refresh_age(state.last_refresh, datetime.now())}")

    date_range = controller.date_range()
    col1, col2 = st.columns(2)
    with col1:
        st.metric("С", format_date_ru(date.fromisoformat(date_range["startDate"])))
    with col2:
        st.metric("По", format_date_ru(date.fromisoformat(date_range["endDate"])))

    st.markdown("---")

    tab1, tab2, tab3 = st.tabs(["📊 Сравнение", "🕒 Доступность", "📆 Недели месяца"])

    with tab1:
        presets = load_preset_table(today)
        st.dataframe(presets, use_container_width=True, hide_index=True)
        if presets["Несовпадение недель"].any():
            st.warning("В прошлом году нет 53-й недели: сравнение идёт с последней неделей года.")

    with tab2:
        table = load_availability_table(
            tuple(dashboard_cfg.get("metrics", [])),
            state.active_period,
            state.period_type.value,
            today,
            int(config["report_schedule"]["publish_weekday"]),
        )
        st.dataframe(table, use_container_width=True, hide_index=True)

    with tab3:
        timeline = build_month_timeline(state.selected_month, today)
        fig = px.timeline(
            timeline,
            x_start="Начало",
            x_end="Конец",
            y="Неделя",
            color="Статус",
            title=format_month_label(state.selected_month, today),
        )
        fig.update_yaxes(autorange="reversed")
        fig.update_layout(template="plotly_dark", plot_bgcolor="rgba(0,0,0,0)", paper_bgcolor="rgba(0,0,0,0)")
        st.plotly_chart(fig, use_container_width=True)


if __name__ == "__main__":
    main()
