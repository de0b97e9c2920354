"""
Streamlit view for the trade sessions overview.

Only public data is shown: flow state, last action, token and public key.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st  # type: ignore

from enums.trade_action import FlowState
from repositories.session_repository import SessionRepository


def render(repo: SessionRepository, limit: int = 200) -> None:
    st.subheader("Sesiones de usuario")
    counts = repo.count_by_state()
    cols = st.columns(len(FlowState))
    for col, state in zip(cols, FlowState):
        col.metric(state.value, f"{counts.get(state.value, 0)}")

    rows = repo.list_all(limit=limit)
    if not rows:
        st.info("Sin sesiones todavía.")
        return
    df = pd.DataFrame(rows)
    df["updated_at"] = pd.to_datetime(df["updated_at"], unit="s", utc=True)

    states = sorted(df["state"].dropna().unique())
    selected = st.selectbox("Filtrar por estado", options=["(Todos)"] + states)
    if selected != "(Todos)":
        df = df[df["state"] == selected]
    st.dataframe(df, use_container_width=True)
