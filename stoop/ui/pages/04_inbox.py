"""
Inbox page - read and triage listener messages.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from stoop.ui.api_client import APIError, get_api_client  # noqa: E402

client = get_api_client(st.session_state.api_base_url, st.session_state.api_key)

st.header("Inbox")
unread_only = st.toggle("Unread only", value=False)

try:
    messages = client.list_messages(unread_only=unread_only)
except APIError as exc:
    st.error(f"Could not fetch messages: {exc.message}")
    messages = []

if not messages:
    st.info("No messages.")

for message in messages:
    label = message["message"][:80]
    prefix = "" if message["is_read"] else "● "
    with st.expander(f"{prefix}{label}", expanded=not message["is_read"]):
        st.write(message["message"])
        st.caption(message["created_at"])
        notes = st.text_area("Notes", value=message.get("admin_notes") or "", key=f"notes_{message['id']}")
        col1, col2, col3 = st.columns(3)
        try:
            with col1:
                if st.button("Save notes", key=f"save_{message['id']}"):
                    client.update_message(message["id"], admin_notes=notes)
                    st.rerun()
            with col2:
                toggle_label = "Mark unread" if message["is_read"] else "Mark read"
                if st.button(toggle_label, key=f"read_{message['id']}"):
                    client.update_message(message["id"], is_read=not message["is_read"])
                    st.rerun()
            with col3:
                if st.button("Delete", key=f"del_{message['id']}"):
                    client.delete_message(message["id"])
                    st.rerun()
        except APIError as exc:
            st.error(exc.message)
