"""Performance Overview page."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from dashboard.utils import api_get, sidebar_api_key
from valuebet.services.bets import settlement_credit

st.set_page_config(page_title="Performance | ValueBet Oracle", layout="wide")
sidebar_api_key()

st.title("Performance Overview")

perf = api_get("/api/performance/summary")

if not perf or perf.get("total_bets", 0) == 0:
    st.info("No bets placed yet.")
    st.stop()

# --- Key metrics ---
c1, c2, c3, c4, c5 = st.columns(5)
c1.metric("Bankroll",     f"${perf['amount']:,.2f}", delta=f"{perf['roi_pct']:+.1f}% ROI")
c2.metric("Total Bets",   perf["total_bets"])
c3.metric("Win Rate",     f"{perf['win_rate']:.1%}")
c4.metric("Average Edge", f"{perf['avg_edge']:.2f}%")
c5.metric("Settled P&L",  f"${perf['settled_profit']:+,.2f}")

st.caption(
    f"{perf['wins']}W - {perf['losses']}L - {perf['voids']}V, "
    f"{perf['pending']} pending | ${perf['total_staked']:,.2f} staked"
)

st.markdown("---")

# --- Cumulative P&L over settled bets, oldest first ---
bets = api_get("/api/bets") or []
df = pd.DataFrame(bets)
settled = df[df["status"] != "pending"].sort_values("id") if not df.empty else df

if settled.empty:
    st.info("No settled bets yet.")
    st.stop()

settled = settled.assign(
    pl=settled.apply(
        lambda b: settlement_credit(b["stake"], b["odds"], b["status"]) - b["stake"],
        axis=1,
    )
)
cum_profit = settled["pl"].cumsum().tolist()

st.subheader("Cumulative P&L")
positive = (cum_profit[-1] if cum_profit else 0) >= 0
fig_pl = go.Figure()
fig_pl.add_trace(go.Scatter(
    x=list(range(1, len(cum_profit) + 1)),
    y=cum_profit,
    mode="lines",
    fill="tozeroy",
    fillcolor="rgba(0,180,0,0.1)" if positive else "rgba(220,0,0,0.1)",
    line=dict(color="green" if positive else "red"),
))
fig_pl.add_hline(y=0, line_dash="dash", line_color="gray")
fig_pl.update_layout(
    xaxis_title="Settled Bet Number", yaxis_title="Cumulative P&L ($)", height=320,
)
st.plotly_chart(fig_pl, use_container_width=True)

# --- Edge vs result ---
st.subheader("Edge at Placement vs Result")
fig_edge = go.Figure()
for status, color in [("win", "green"), ("loss", "red"), ("void", "gray")]:
    part = settled[settled["status"] == status]
    fig_edge.add_trace(go.Scatter(
        x=part["id"], y=part["edge"], mode="markers", name=status.title(),
        marker=dict(color=color, size=9),
    ))
fig_edge.update_layout(xaxis_title="Bet ID", yaxis_title="Edge (%)", height=320)
st.plotly_chart(fig_edge, use_container_width=True)
