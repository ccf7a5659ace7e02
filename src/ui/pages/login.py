"""Login page."""

from __future__ import annotations

import streamlit as st

from src.ui.app_controller import login


def render_login_page() -> None:
    """Credential form. Reruns the app on success."""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.markdown("## 🏢 SMO Reporting")
        st.caption("Tableau de bord des opérations immobilières")
        with st.form("login_form"):
            username = st.text_input("Identifiant")
            password = st.text_input("Mot de passe", type="password")
            submitted = st.form_submit_button("Se connecter", type="primary", use_container_width=True)

        if submitted and login(username.strip(), password):
            st.rerun()
