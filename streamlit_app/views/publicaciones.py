"""
Streamlit view for the channel post history.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st  # type: ignore

from repositories.post_repository import PostRepository


def render(repo: PostRepository, limit: int = 100) -> None:
    st.subheader("Historial de publicaciones")
    rows = repo.list_recent(limit=limit)
    if not rows:
        st.info("Aún no se ha publicado nada en el canal.")
        return
    df = pd.DataFrame(rows)
    df["posted_at"] = pd.to_datetime(df["posted_at"], unit="s", utc=True)

    c1, c2 = st.columns(2)
    c1.metric("Publicaciones", f"{len(df)}")
    c2.metric("Última", df["posted_at"].max().strftime("%Y-%m-%d %H:%M UTC"))

    cols = [c for c in ["id", "template_name", "template_id", "message_id", "posted_at", "image_url"] if c in df.columns]
    st.dataframe(df[cols], use_container_width=True)
