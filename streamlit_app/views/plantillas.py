"""
Streamlit views for channel templates: listing with preview/post, and the
creation form.
"""

from __future__ import annotations

import streamlit as st  # type: ignore

from controllers.channel_controller import ChannelPoster
from models.errors import BotError
from repositories.template_repository import TemplateRepository
from schemas.template_schema import TemplateCreate


def render_list(poster: ChannelPoster) -> None:
    st.subheader("Plantillas guardadas")
    stored = poster.templates.list_all()
    if not stored:
        st.info("No hay plantillas. Crea una en la pestaña 'Nueva plantilla'.")
        return

    names = {f"#{t.id} · {t.name}": t for t in stored}
    choice = st.selectbox("Plantilla", options=list(names))
    template = names[choice]

    with st.expander("HTML / CSS"):
        st.code(template.html, language="html")
        st.code(template.css, language="css")

    c1, c2 = st.columns(2)
    if c1.button("👁️ Vista previa", key=f"preview_{template.id}"):
        with st.spinner("Renderizando..."):
            try:
                st.image(poster.render(template), caption=template.name)
            except BotError as e:
                st.error(f"No se pudo renderizar: {e.detail or e.reason.value}")

    if c2.button("📤 Publicar en el canal", key=f"post_{template.id}"):
        with st.spinner("Publicando..."):
            try:
                post = poster.post_once(template.id)
            except BotError as e:
                st.error(f"Error al publicar ({e.reason.value}): {e.detail}")
            else:
                if post is None:
                    st.warning("Hay una publicación en curso; vuelve a intentarlo.")
                else:
                    st.success(f"Publicado (message_id={post.message_id}).")


def render_form(repo: TemplateRepository) -> None:
    st.subheader("Nueva plantilla")
    st.caption("Marcadores disponibles: $update_number, $timestamp, $name, $symbol, $price_usd, "
               "$market_cap, $volume_h24, $liquidity_usd, $price_change_h24, $change_class, $dex_id. "
               "Usa $$ para un símbolo $ literal.")
    with st.form("new_template", clear_on_submit=False):
        name = st.text_input("Nombre")
        html = st.text_area("HTML", height=200)
        css = st.text_area("CSS", height=200)
        submitted = st.form_submit_button("Guardar")

    if not submitted:
        return
    data = TemplateCreate(name=name, html=html, css=css)
    problems = data.errors()
    if problems:
        for p in problems:
            st.error(p)
        return
    template = repo.create(data.name, data.html, data.css)
    st.success(f"Plantilla '{template.name}' guardada con id {template.id}.")
