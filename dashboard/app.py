"""
Streamlit Dashboard for the ValueBet Oracle
Pick a market, get a fair-value estimate and Kelly stake, log and settle bets
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pandas as pd
import streamlit as st

from dashboard.utils import (
    RISK_MODELS,
    RISK_MULTIPLIERS,
    STATUS_ICONS,
    api_get,
    api_post,
    flatten_outcomes,
    placeable_stake,
    risk_model,
    sidebar_api_key,
)
from valuebet.core.odds_math import roi_pct

st.set_page_config(
    page_title="ValueBet Oracle",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)

sidebar_api_key()


# ==============================================================================
# SIDEBAR
# ==============================================================================

bankroll = api_get("/api/bankroll")

with st.sidebar:
    st.title("📈 ValueBet Oracle")
    st.markdown("---")

    page = st.radio("Navigate", ["🎯 Dashboard", "📋 History", "⚙️ Settings"])

    st.markdown("---")
    if bankroll:
        roi = roi_pct(bankroll["amount"], bankroll["initial_amount"])
        st.metric("Bankroll", f"${bankroll['amount']:,.2f}", delta=f"{roi:+.1f}% Total ROI")
    st.metric("Risk Model", risk_model(), help=f"Multiplier: {RISK_MULTIPLIERS[risk_model()]}")


# ==============================================================================
# DASHBOARD PAGE
# ==============================================================================

if page == "🎯 Dashboard":
    st.title("Market Scanner")

    sports = api_get("/api/sports") or []
    active = {s["title"]: s["key"] for s in sports if s.get("active")}

    if not active:
        st.warning("No active sports available from the odds provider.")
        st.stop()

    sport_title = st.selectbox("Sport", sorted(active))
    events = api_get("/api/odds", {"sport": active[sport_title]}) or []
    rows = flatten_outcomes(events)

    if not rows:
        st.info("No priced events for this sport right now.")
        st.stop()

    df = pd.DataFrame(rows)
    event_label = st.selectbox("Event", df["event"].unique())
    event_rows = df[df["event"] == event_label]

    st.dataframe(
        event_rows[["bookmaker", "market_key", "outcome", "price"]].rename(columns={
            "bookmaker": "Bookmaker", "market_key": "Market", "outcome": "Outcome", "price": "Price",
        }),
        use_container_width=True,
        hide_index=True,
    )

    st.subheader("Analyze an Outcome")
    options = {
        f"{r.bookmaker} | {r.market} @ {r.price:.2f}": r
        for r in event_rows.itertuples()
    }
    choice = st.selectbox("Outcome", list(options))
    selected = options[choice]

    col1, col2 = st.columns(2)
    with col1:
        manual_odd = st.number_input(
            "Manual price override (0 = use bookmaker price)",
            min_value=0.0, value=0.0, step=0.01,
        )
    with col2:
        context = st.text_input("Additional context (optional)", max_chars=500)

    price = manual_odd if manual_odd > 1 else float(selected.price)

    if st.button("Run Analysis", type="primary"):
        with st.spinner("Asking the oracle..."):
            analysis = api_post(
                "/api/analysis",
                {
                    "event": selected.event,
                    "market": selected.market,
                    "odds": price,
                    "context": context,
                    "risk_model": risk_model(),
                },
                timeout=60,
            )
        if analysis:
            st.session_state["analysis"] = {
                **analysis, "event": selected.event, "market": selected.market, "odds": price,
            }

    analysis = st.session_state.get("analysis")
    if analysis and analysis["event"] == selected.event and analysis["market"] == selected.market:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Fair Odd", f"{analysis['fairOdd']:.2f}")
        c2.metric("True Probability", f"{analysis['probability']:.1%}")
        c3.metric("Calculated Edge", f"{analysis['edge']:.2f}%")
        c4.metric("Suggested Stake", f"${analysis['recommendedStake']:,.2f}")

        if analysis["source"] == "fallback":
            st.warning(analysis["notes"])
        else:
            st.info(analysis["notes"])

        stake = placeable_stake(analysis["recommendedStake"])
        if stake > 0:
            if st.button(f"Place ${stake:,.2f} at {analysis['odds']:.2f}"):
                result = api_post("/api/bets", {
                    "event": analysis["event"],
                    "market": analysis["market"],
                    "odds": analysis["odds"],
                    "fair_odds": analysis["fairOdd"],
                    "edge": analysis["edge"],
                    "stake": stake,
                })
                if result:
                    st.success(f"Bet #{result['id']} placed.")
                    st.session_state.pop("analysis", None)
                    st.rerun()
        else:
            st.caption("No placeable stake at this price (no edge, or under one cent).")


# ==============================================================================
# HISTORY PAGE
# ==============================================================================

elif page == "📋 History":
    st.title("Bet History")

    bets = api_get("/api/bets") or []
    if not bets:
        st.info("No bets placed yet.")
        st.stop()

    df = pd.DataFrame(bets)
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Bets", len(df))
    c2.metric("Average Edge", f"{df['edge'].mean():.2f}%")
    c3.metric("Pending", int((df["status"] == "pending").sum()))

    pending = df[df["status"] == "pending"]
    if not pending.empty:
        st.subheader("Pending: Record Results")
        for bet in pending.itertuples():
            with st.expander(f"#{bet.id} | {bet.event} | {bet.market} @ {bet.odds:.2f} | ${bet.stake:,.2f}"):
                cols = st.columns(3)
                for col, status in zip(cols, ["win", "loss", "void"]):
                    if col.button(status.title(), key=f"{status}_{bet.id}"):
                        result = api_post(f"/api/bets/{bet.id}/result", {"status": status})
                        if result:
                            st.success(f"Bankroll change: ${result['bankrollChange']:+,.2f}")
                            st.rerun()

    st.subheader("All Bets")
    df["result"] = df["status"].map(lambda s: f"{STATUS_ICONS.get(s, '')} {s}")
    st.dataframe(
        df[["id", "created_at", "event", "market", "odds", "fair_odds", "edge", "stake", "result"]].rename(columns={
            "id": "ID",
            "created_at": "Placed",
            "event": "Event",
            "market": "Market",
            "odds": "Odds",
            "fair_odds": "Fair Odds",
            "edge": "Edge %",
            "stake": "Stake",
            "result": "Status",
        }),
        use_container_width=True,
        hide_index=True,
    )


# ==============================================================================
# SETTINGS PAGE
# ==============================================================================

elif page == "⚙️ Settings":
    st.title("Settings")

    st.subheader("Risk Model")
    selected_model = st.radio(
        "Stake multiplier applied to full Kelly",
        RISK_MODELS,
        index=RISK_MODELS.index(risk_model()),
        format_func=lambda m: f"{m} ({RISK_MULTIPLIERS[m]} Multiplier)",
        horizontal=True,
    )
    st.session_state["risk_model"] = selected_model

    st.markdown("---")
    st.subheader("Reset Bankroll")
    st.caption("Sets both the balance and the ROI baseline. ROI history is lost.")
    with st.form("reset_bankroll"):
        amount = st.number_input("New bankroll", min_value=0.0, value=1000.0, step=100.0)
        if st.form_submit_button("Reset", type="primary"):
            if api_post("/api/bankroll/reset", {"amount": amount}):
                st.success(f"Bankroll reset to ${amount:,.2f}")
                st.rerun()

    st.markdown("---")
    st.caption(
        "Value betting is a long-term strategy based on statistical edges. Variance is real, "
        "and losing streaks can happen even with +EV bets. Never bet more than you can afford to lose."
    )


# Footer
st.markdown("---")
st.caption("ValueBet Oracle | Built with Streamlit")
