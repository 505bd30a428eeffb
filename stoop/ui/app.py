"""
Stoop Politics admin UI - main entry point.

Run with: ``streamlit run stoop/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from stoop.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (stoop/ui/),
# which removes the project root needed for absolute ``stoop.*`` imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from stoop.core.config import get_settings  # noqa: E402
from stoop.ui.api_client import get_api_client  # noqa: E402
from stoop.ui.components.recorder import release_capture  # noqa: E402

_settings = get_settings()

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title=f"{_settings.site_name} Admin",
    page_icon="\U0001f399️",
    layout="wide",
)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": _settings.api_base_url,
    "api_key": "",
    "authenticated": False,
    "capture": None,
    "editing_episode_id": None,
    "editor_session": None,
    "last_page": None,
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

# ---------------------------------------------------------------------------
# Navigation (multipage)
# ---------------------------------------------------------------------------
login_page = st.Page("pages/00_login.py", title="Login", icon="\U0001f511")
new_episode_page = st.Page(
    "pages/01_new_episode.py",
    title="New Episode",
    icon="\U0001f3a4",
)
episodes_page = st.Page(
    "pages/02_episodes.py",
    title="Episodes",
    icon="\U0001f4cb",
    default=True,
)
editor_page = st.Page("pages/03_editor.py", title="Transcript Editor", icon="✏️")
inbox_page = st.Page("pages/04_inbox.py", title="Inbox", icon="\U0001f4ec")

# Only the login page exists until a key has been verified
if not st.session_state.authenticated:
    nav = st.navigation([login_page])
    nav.run()
    st.stop()

with st.sidebar:
    st.title(f"\U0001f399️ {_settings.site_name}")
    _client = get_api_client(st.session_state.api_base_url, st.session_state.api_key)
    _conn_ok, _conn_msg = _client.check_connection()
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
    else:
        st.error(f"Backend: {_conn_msg}")
    st.link_button("View public site", _settings.public_base_url, use_container_width=True)
    if st.button("Log out", use_container_width=True):
        release_capture()
        st.session_state.authenticated = False
        st.session_state.api_key = ""
        st.rerun()

nav = st.navigation([episodes_page, new_episode_page, editor_page, inbox_page])

# Leaving the recorder releases the microphone
if st.session_state.last_page == new_episode_page.title and nav.title != new_episode_page.title:
    release_capture()
st.session_state.last_page = nav.title

nav.run()
