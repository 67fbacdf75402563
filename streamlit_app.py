#Description: Streamlit dashboard: mode, recent signals and trades, Kraken connectivity and balances.

import streamlit as st

from utils.context import get_app_context
from utils.logging import logger

st.set_page_config(
    page_title="TradingView → Kraken Relay",
    page_icon="📈",
    layout="wide",
)

ctx = get_app_context()
if "app_initialized" not in st.session_state:
    st.session_state["app_initialized"] = True
    logger.info("Dashboard initialized")

st.title("TradingView → Kraken Relay")
cfg = ctx.settings
st.write(f"Mode: {cfg.MODE.upper()} | Kraken: {'on' if ctx.venue else 'off'} | "
         f"Telegram: {'on' if ctx.notifier else 'off'}")
if not cfg.is_live:
    st.info("Orders are sent with validate=true: Kraken checks them but does not execute them. Set MODE=live to trade.")

st.divider()

if ctx.store is None:
    st.error("Database unavailable.")
else:
    st.subheader("Recent Signals")
    st.dataframe(ctx.store.signals_df(cfg.RECENT_LIMIT), use_container_width=True)
    st.subheader("Recent Trades")
    st.dataframe(ctx.store.trades_df(cfg.RECENT_LIMIT), use_container_width=True)

st.divider()

st.subheader("Kraken")
if ctx.venue is None:
    st.warning("KRAKEN_API_KEY / KRAKEN_API_SECRET not set.")
else:
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Test Connectivity"):
            ok, msg = ctx.venue.test_connectivity()
            st.write("Result:", ok, msg)
    with col2:
        if st.button("Show Balances"):
            try:
                st.json(ctx.venue.get_balance())
            except Exception as e:
                logger.exception(f"Balance lookup failed: {e}")
                st.error(f"Balance lookup failed: {e}")
