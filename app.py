"""
Licensing Deal Calculator - transfer price and profit share deal economics.
Deal inputs recompute live; both deal structures are shown side by side.
"""

import logging
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from dotenv import load_dotenv

# Load environment variables
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path, override=True)

from dealcalc.config import settings
from dealcalc.deal_analysis import (
    DEAL_STATUSES,
    DealAnalysisResult,
    DealRecord,
    get_analyzer,
    royalty_tier_table,
    royalty_tiers_from_table,
)
from dealcalc.deal_storage import load_deals, load_forecasts, new_deal_id, save_deals, save_forecasts
from dealcalc.fx import format_rate_display, get_fx_rates
from dealcalc.models import FORECAST_YEARS, DealMode, RoyaltyBase
from dealcalc.territory import COUNTRIES, CountryForecast, calculate_territory_forecast

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="Licensing Deal Calculator", page_icon="💊", layout="wide")

CURRENCY_SYMBOLS = {"EUR": "€", "GBP": "£", "USD": "$"}

# CSS
st.markdown("""
<style>
#MainMenu, footer, .stDeployButton {visibility: hidden; display: none;}
.page-title {font-size: 34px; font-weight: 700; margin-bottom: 4px;}
.page-subtitle {font-size: 14px; color: #8e8e93; margin-bottom: 20px;}
.section-header {font-size: 20px; font-weight: 600; margin: 24px 0 12px 0;}
.stat-card {background-color: #1c1c1e; border-radius: 12px; padding: 16px; margin-bottom: 8px;}
.stat-label {font-size: 12px; color: #8e8e93; text-transform: uppercase;}
.stat-value {font-size: 24px; font-weight: 700; color: #ffffff;}
.stat-change-positive {font-size: 13px; color: #34c759;}
.stat-change-negative {font-size: 13px; color: #ff3b30;}
.stat-change-neutral {font-size: 13px; color: #8e8e93;}
</style>
""", unsafe_allow_html=True)


@st.cache_data(ttl=3600, show_spinner=False)
def get_fx_rates_cached():
    return get_fx_rates()


def format_money(num, currency="EUR"):
    symbol = CURRENCY_SYMBOLS.get(currency, "")
    if num is None:
        return "N/A"
    sign = "-" if num < 0 else ""
    num = abs(num)
    if num >= 1_000_000:
        return f"{sign}{symbol}{num/1_000_000:.2f}M"
    if num >= 1_000:
        return f"{sign}{symbol}{num/1_000:.1f}K"
    return f"{sign}{symbol}{num:,.2f}"


def margin_class(margin):
    if margin > 20:
        return "positive"
    if margin > 0:
        return "neutral"
    return "negative"


def stat_card(label, value, detail=None, direction="neutral"):
    detail_html = f'<div class="stat-change-{direction}">{detail}</div>' if detail else ""
    st.markdown(f'''<div class="stat-card">
        <div class="stat-label">{label}</div>
        <div class="stat-value">{value}</div>
        {detail_html}
    </div>''', unsafe_allow_html=True)


def render_deal_form(defaults: DealRecord) -> DealRecord:
    """Sidebar inputs; every change produces a new record and a recompute."""
    sb = st.sidebar
    sb.markdown("### Deal")

    company_name = sb.text_input("Company", value=defaults.company_name)
    status = sb.selectbox("Status", options=list(DEAL_STATUSES), index=DEAL_STATUSES.index(defaults.status))

    currencies = settings.fx.supported
    col1, col2 = sb.columns(2)
    with col1:
        deal_currency = st.selectbox("Deal currency", currencies, index=currencies.index(defaults.deal_currency))
    with col2:
        comparison_currency = st.selectbox(
            "Show in", currencies, index=currencies.index(defaults.comparison_currency)
        )

    mode = sb.radio(
        "Deal structure",
        options=[m.value for m in DealMode],
        format_func=lambda v: DealMode(v).label,
        index=[m.value for m in DealMode].index(defaults.mode),
    )

    sb.markdown("### Pricing")
    transfer_price = sb.number_input(
        f"Transfer price per unit ({deal_currency})", min_value=0.0, value=float(defaults.transfer_price), step=0.1
    )
    partner_price = sb.number_input(
        f"Partner selling price per unit ({deal_currency})",
        min_value=0.0,
        value=float(defaults.partner_selling_price or 0.0),
        step=0.1,
        help="Leave at 0 if unknown (no partner analysis in transfer price mode)",
    )
    royalty_base = sb.radio(
        "Royalties calculated on",
        options=[b.value for b in RoyaltyBase],
        format_func=lambda v: "Transfer price" if v == RoyaltyBase.ON_PRICE.value else "Transfer price minus COGS",
        index=[b.value for b in RoyaltyBase].index(defaults.royalty_base),
    )
    sla_share = sb.slider(
        "Profit share to us (%)", min_value=0, max_value=100, value=int(round(defaults.sla_share_percent * 100))
    ) / 100.0
    overhead_rate = sb.slider(
        "Overhead (% of profit)", min_value=0, max_value=50, value=int(round(defaults.overhead_rate * 100))
    ) / 100.0

    use_override = sb.checkbox("Manual COGS per unit", value=defaults.cost_override is not None)
    cost_override = None
    if use_override:
        cost_override = sb.number_input(
            f"COGS per unit ({deal_currency})", min_value=0.0, value=float(defaults.cost_override or 0.0), step=0.01
        )

    sb.markdown("### Forecast (units)")
    forecast = list(defaults.forecast_sales)
    if defaults.country_breakdown:
        totals = defaults.effective_forecast()
        sb.caption(f"From {len(defaults.country_breakdown)} countries: " + ", ".join(f"{v:,.0f}" for v in totals))
    else:
        forecast = []
        for i in range(FORECAST_YEARS):
            forecast.append(sb.number_input(
                f"Year {i + 1}", min_value=0, value=int(defaults.forecast_sales[i]), step=1000,
                key=f"forecast_{defaults.id}_{i}",
            ))

    sb.markdown("### Service fees")
    fees = {}
    for key in ("signing", "approval", "launch"):
        current = defaults.service_fees.get(key, {})
        col_amount, col_year = sb.columns([2, 1])
        with col_amount:
            amount = st.number_input(
                f"{key.title()} ({deal_currency})", min_value=0.0, value=float(current.get("amount", 0.0)),
                step=1000.0, key=f"fee_{defaults.id}_{key}",
            )
        with col_year:
            year = st.selectbox("Year", options=[1, 2, 3], index=int(current.get("year", 1)) - 1, key=f"fee_year_{defaults.id}_{key}")
        fees[key] = {"amount": amount, "year": year}

    sb.markdown("### Royalty tiers")
    sb.caption("Paid in order; each tier takes its rate of what the earlier tiers leave.")
    edited_tiers = sb.data_editor(
        royalty_tier_table(defaults.royalty_tiers),
        num_rows="dynamic",
        hide_index=True,
        use_container_width=True,
        column_config={
            "Rate (%)": st.column_config.NumberColumn(min_value=0.0, max_value=100.0, step=0.5, format="%.2f"),
        },
        key=f"tiers_{defaults.id}",
    )

    return DealRecord(
        id=defaults.id,
        company_name=company_name,
        status=status,
        date_added=defaults.date_added,
        deal_currency=deal_currency,
        comparison_currency=comparison_currency,
        mode=mode,
        transfer_price=transfer_price,
        royalty_base=royalty_base,
        partner_selling_price=partner_price if partner_price > 0 else None,
        sla_share_percent=sla_share,
        overhead_rate=overhead_rate,
        cost_override=cost_override,
        forecast_sales=[float(v) for v in forecast],
        country_breakdown=defaults.country_breakdown,
        service_fees=fees,
        royalty_tiers=royalty_tiers_from_table(edited_tiers),
    )


def create_comparison_chart(result: DealAnalysisResult, height=350):
    """Yearly net profit for both deal structures."""
    currency = result.display_currency
    symbol = CURRENCY_SYMBOLS.get(currency, "")
    colors = {DealMode.TRANSFER_PRICE: "#007aff", DealMode.PROFIT_SHARE: "#34c759"}

    fig = go.Figure()
    for five_year in (result.primary, result.alternate):
        fig.add_trace(go.Bar(
            name=five_year.mode.label,
            x=[f"Y{y.year}" for y in five_year.years],
            y=[result.to_display(y.net_profit) for y in five_year.years],
            marker_color=colors[five_year.mode],
            hovertemplate=f"{five_year.mode.label}: {symbol}%{{y:,.0f}}<extra></extra>",
        ))

    fig.update_layout(
        barmode="group",
        height=height,
        margin=dict(l=0, r=0, t=30, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        xaxis=dict(showgrid=False, showline=False, tickfont=dict(color="#8e8e93", size=10)),
        yaxis=dict(
            showgrid=True,
            gridcolor="rgba(142,142,147,0.2)",
            tickfont=dict(color="#8e8e93", size=10),
            tickprefix=symbol,
            tickformat=",.0f",
        ),
        hovermode="x unified",
    )
    return fig


def render_results(result: DealAnalysisResult):
    """Render KPI cards, the comparison chart and the yearly tables."""
    currency = result.display_currency
    primary = result.primary

    st.markdown(f'<div class="section-header">{primary.mode.label} - five years</div>', unsafe_allow_html=True)
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        stat_card("Revenue", format_money(result.to_display(primary.total_revenue), currency))
    with col2:
        stat_card("Royalties", format_money(result.to_display(primary.total_royalties), currency))
    with col3:
        stat_card(
            "Net Profit",
            format_money(result.to_display(primary.total_net_profit), currency),
            f"Margin {primary.average_margin_percent:.1f}%",
            margin_class(primary.average_margin_percent),
        )
    with col4:
        stat_card(
            "Partner Profit",
            format_money(result.to_display(primary.total_partner_profit), currency),
        )

    delta = result.to_display(result.comparison.net_profit_delta)
    better = result.comparison.preferred_mode.label
    st.caption(
        f"{result.alternate.mode.label} would change five-year net profit by {format_money(delta, currency)} "
        f"({better} is higher)."
    )

    st.markdown('<div class="section-header">Net Profit by Year</div>', unsafe_allow_html=True)
    st.plotly_chart(create_comparison_chart(result), use_container_width=True, config={"displayModeBar": False})

    st.markdown('<div class="section-header">Yearly Detail</div>', unsafe_allow_html=True)
    st.dataframe(result.summary_frame().round(2), use_container_width=True)

    st.markdown('<div class="section-header">Royalty Cascade (five-year totals)</div>', unsafe_allow_html=True)
    tiers = result.parameters.royalty_tiers
    totals = primary.royalty_totals()
    st.dataframe(pd.DataFrame([
        {
            "Royalty holder": t.name,
            "Rate": f"{t.rate * 100:.1f}%",
            f"Amount ({currency})": round(result.to_display(totals.get(t.name, 0.0)), 2),
        }
        for t in tiers
    ]), use_container_width=True, hide_index=True)


def render_saved_deals(deals):
    """List saved deals with load and delete actions."""
    st.markdown('<div class="section-header">Saved Deals</div>', unsafe_allow_html=True)
    if not deals:
        st.info("No deals saved yet.")
        return

    for deal in deals:
        col1, col2, col3 = st.columns([6, 1, 1])
        with col1:
            st.markdown(
                f"**{deal.company_name}** - {DealMode(deal.mode).label} - {deal.status.title()} "
                f"<span style='color:#8e8e93'>({deal.date_added})</span>",
                unsafe_allow_html=True,
            )
        with col2:
            if st.button("Open", key=f"open_{deal.id}"):
                st.session_state.current_deal = deal
                st.rerun()
        with col3:
            if st.button("Delete", key=f"del_{deal.id}"):
                save_deals([d for d in deals if d.id != deal.id])
                st.rerun()


def render_territory_sizing(record: DealRecord):
    """Peak market sizing per country and the deal's country breakdown."""
    st.markdown('<div class="section-header">Territory Sizing</div>', unsafe_allow_html=True)
    with st.expander("Size a market", expanded=False):
        names = [c.name for c in COUNTRIES]
        col1, col2 = st.columns(2)
        with col1:
            country = COUNTRIES[st.selectbox("Country", range(len(names)), format_func=lambda i: names[i])]
            prevalence = st.number_input("Prevalence (% of population)", min_value=0.0, value=0.35, step=0.05)
            addressable = st.number_input("Addressable (%)", min_value=0.0, max_value=100.0, value=40.0, step=5.0)
        with col2:
            share = st.number_input("Market share (%)", min_value=0.0, max_value=100.0, value=50.0, step=5.0)
            price = st.number_input(f"Price per unit ({record.deal_currency})", min_value=0.0, value=10.0, step=0.5)

        sizing = calculate_territory_forecast(country, prevalence, addressable, share, price)
        col1, col2, col3 = st.columns(3)
        with col1:
            stat_card("Market size", f"{sizing.market_size:,.0f}")
        with col2:
            stat_card("Peak units", f"{sizing.share_units:,.0f}")
        with col3:
            stat_card("Peak revenue", format_money(sizing.peak_revenue, record.deal_currency))

        st.markdown("**Units by year for this country**")
        cols = st.columns(FORECAST_YEARS)
        years = []
        for i, col in enumerate(cols):
            with col:
                years.append(st.number_input(
                    f"Y{i + 1}", min_value=0, value=int(sizing.share_units), step=1000, key=f"terr_{country.code}_{i}"
                ))

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Add to deal forecast", key="add_country"):
                entries = [c for c in record.country_breakdown if c.country_code != country.code]
                entries.append(CountryForecast(country.code, tuple(float(v) for v in years)))
                record.country_breakdown = entries
                st.session_state.current_deal = record
                st.rerun()
        with col2:
            if st.button("Save sizing", key="save_sizing"):
                saved = load_forecasts()
                saved.append({
                    "id": new_deal_id(),
                    "country_code": country.code,
                    "prevalence_pct": prevalence,
                    "addressable_pct": addressable,
                    "market_share_pct": share,
                    "price": price,
                    "peak_units": sizing.share_units,
                })
                save_forecasts(saved)
                st.success(f"Saved sizing for {country.name}")

    if record.country_breakdown:
        st.dataframe(pd.DataFrame(
            [[c.country.name if c.country else c.country_code, *c.years] for c in record.country_breakdown],
            columns=["Country"] + [f"Y{i + 1}" for i in range(FORECAST_YEARS)],
        ), use_container_width=True, hide_index=True)
        if st.button("Clear country breakdown", key="clear_breakdown"):
            record.country_breakdown = []
            st.session_state.current_deal = record
            st.rerun()


def new_record() -> DealRecord:
    defaults = settings.deal_defaults
    return DealRecord(
        id=new_deal_id(),
        company_name="New partner",
        deal_currency=defaults.deal_currency,
        comparison_currency=defaults.deal_currency,
        transfer_price=5.0,
        royalty_base=defaults.royalty_base,
        sla_share_percent=defaults.sla_share_percent,
        overhead_rate=defaults.overhead_rate,
        forecast_sales=[11000.0, 22000.0, 44000.0, 66000.0, 110000.0],
    )


def main():
    if "current_deal" not in st.session_state:
        st.session_state.current_deal = new_record()

    rates = get_fx_rates_cached()
    record = render_deal_form(st.session_state.current_deal)

    st.markdown('<div class="page-title">Licensing Deal Calculator</div>', unsafe_allow_html=True)
    rate_text = " | ".join(format_rate_display(rates).values())
    st.markdown(
        f'<div class="page-subtitle">{rate_text} (updated {rates.last_updated})</div>', unsafe_allow_html=True
    )

    result = get_analyzer().analyze(record, rates)
    render_results(result)
    render_territory_sizing(record)

    deals = load_deals()
    col1, col2 = st.columns([3, 1])
    with col1:
        if st.button("New Deal", key="new_deal"):
            st.session_state.current_deal = new_record()
            st.rerun()
    with col2:
        if st.button("Save Deal", key="save_deal", use_container_width=True):
            others = [d for d in deals if d.id != record.id]
            save_deals([record] + others)
            st.session_state.current_deal = record
            st.success(f"Saved {record.company_name}")
            deals = load_deals()

    render_saved_deals(deals)


if __name__ == "__main__":
    main()
