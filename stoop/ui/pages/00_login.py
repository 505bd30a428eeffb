"""
Login page - verify the admin key before any other page is shown.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from stoop.ui.api_client import APIError, get_api_client  # noqa: E402

st.header("Admin Login")

with st.form("login"):
    api_base_url = st.text_input("Backend API URL", value=st.session_state.api_base_url)
    api_key = st.text_input("Admin key", type="password")
    submitted = st.form_submit_button("Log in", type="primary")

if submitted:
    client = get_api_client(api_base_url, api_key)
    try:
        client.verify_session()
    except APIError as exc:
        if exc.category == "auth":
            st.error("That key was not accepted.")
        else:
            st.error(exc.message)
    else:
        st.session_state.api_base_url = api_base_url
        st.session_state.api_key = api_key
        st.session_state.authenticated = True
        st.rerun()
