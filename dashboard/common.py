import logging

import extra_streamlit_components as stx
import streamlit as st

from scrim import config
from scrim.client import ScrimClient, ScrimClientError
from scrim.optimistic import (
    ATTENDANCE_FIELDS,
    RESULT_FIELDS,
    SCHEDULE_FIELDS,
    OptimisticCollection,
    SyncedCollection,
)

PENDING_LABELS = {
    "create": "⏳ saving",
    "update": "⏳ updating",
    "delete": "⏳ deleting",
}

NAME_COOKIE = "scrim_player_name"


def api_url():
    try:
        return st.secrets.get("scrim_api_url", config.API_URL)
    except FileNotFoundError:
        # No secrets.toml; fall back to the environment
        return config.API_URL


@st.cache_resource
def get_client():
    logging.basicConfig(level=config.LOG_LEVEL)
    return ScrimClient(api_url())


def apply_css():
    st.markdown("""
        <style>
        .block-container {
            padding: 1.5rem 1.4rem !important;
        }
        .appview-container section:first-child {
            width: 250px !important;
        }
        .pending {
            color: #f59e0b;
            font-size: 0.85em;
        }
        </style>
    """, unsafe_allow_html=True)


def _synced(state_key, collection, loader):
    if state_key not in st.session_state:
        synced = SyncedCollection(collection, loader)
        synced.refresh()
        st.session_state[state_key] = synced
        return synced
    synced = st.session_state[state_key]
    # Writes left unconfirmed by their own reconciliation are checked again on every render
    for record in synced.reconcile_due():
        synced.dropped.remove(record)
        st.warning(dropped_message(record))
    return synced


def schedules(fraksi):
    client = get_client()
    return _synced(
        f"schedules_{fraksi}",
        OptimisticCollection(lambda item: item.get("id"), SCHEDULE_FIELDS),
        lambda fresh: client.fetch_schedules(fraksi, fresh=fresh),
    )


def attendance(fraksi):
    client = get_client()
    return _synced(
        f"attendance_{fraksi}",
        OptimisticCollection(
            lambda record: (record.get("scheduleId"), record.get("fraksi"), str(record.get("playerName", "")).lower()),
            ATTENDANCE_FIELDS,
        ),
        lambda fresh: client.list_attendance(fraksi=fraksi, fresh=fresh),
    )


def match_results():
    client = get_client()
    return _synced(
        "match_results",
        OptimisticCollection(lambda record: record.get("id"), RESULT_FIELDS),
        lambda fresh: client.list_match_results(fresh=fresh),
    )


def refresh(*state_keys):
    """Reload cached collections now; ones with pending writes reconcile instead."""
    for key in state_keys:
        synced = st.session_state.get(key)
        if synced is None:
            continue
        try:
            synced.refresh(fresh=True)
        except ScrimClientError as exc:
            flash("error", exc.message)
        report_dropped(synced)


def pending_label(collection, key):
    pending = collection.collection.pending_for(key)
    return PENDING_LABELS.get(pending, "")


def flash(kind, message):
    """Queue a message that survives the next st.rerun()."""
    st.session_state.setdefault("flash", []).append((kind, message))


def show_flash():
    for kind, message in st.session_state.pop("flash", []):
        getattr(st, kind)(message)


def dropped_message(record):
    return f"Perubahan belum tersimpan di sheet ({record.pending}). Silakan refresh dan coba lagi."


def report_dropped(synced):
    """Warn about optimistic writes that never showed up on the sheet."""
    while synced.dropped:
        flash("warning", dropped_message(synced.dropped.pop()))


def remembered_name():
    """Name stored in a cookie so players do not retype it on every visit."""
    if "cookie_manager" not in st.session_state:
        st.session_state.cookie_manager = stx.CookieManager()
    return st.session_state.cookie_manager.get(cookie=NAME_COOKIE) or ""


def remember_name(name):
    if name and "cookie_manager" in st.session_state:
        st.session_state.cookie_manager.set(NAME_COOKIE, name)
