# streamlit_app/dashboard.py
from __future__ import annotations
import os
import time
import streamlit as st

from controllers.channel_controller import build_channel_poster
from repositories.post_repository import PostRepository
from repositories.session_repository import SessionRepository
from streamlit_app.views import plantillas, publicaciones, sesiones

DB_PATH = os.getenv("DB_PATH") or None

@st.cache_resource
def get_poster():
    # una instancia por proceso de streamlit; siembra las plantillas por defecto
    return build_channel_poster(DB_PATH)


st.set_page_config(page_title="Pump Science Wallet", layout="wide")
st.title("📊 Pump Science Wallet · Admin")

poster = get_poster()
post_repo = PostRepository(db_path=DB_PATH)
session_repo = SessionRepository(db_path=DB_PATH)

# Sidebar
st.sidebar.header("Opciones")
auto_refresh = st.sidebar.checkbox("Auto-refresh", value=False)
interval_s   = st.sidebar.number_input("Intervalo (seg)", min_value=5, max_value=300, value=30, step=5)
limit_rows   = st.sidebar.number_input("Filas a mostrar", min_value=20, max_value=1000, value=100, step=20)

tab1, tab2, tab3, tab4 = st.tabs(["Plantillas", "Nueva plantilla", "Publicaciones", "Sesiones"])

with tab1:
    plantillas.render_list(poster)

with tab2:
    plantillas.render_form(poster.templates)

with tab3:
    publicaciones.render(post_repo, limit=int(limit_rows))

with tab4:
    sesiones.render(session_repo, limit=int(limit_rows))

# --------------------------
# Auto-refresh
# --------------------------
if auto_refresh:
    time.sleep(float(interval_s))
    st.rerun()
