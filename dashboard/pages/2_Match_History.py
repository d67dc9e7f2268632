import streamlit as st
from pydantic import ValidationError

from scrim import config, views
from scrim.client import ScrimClientError
from scrim.models import MatchResultPayload, determine_status, first_error_message

import common

st.set_page_config(page_title=f"Match History - {config.TEAM_NAME} Scrim", layout="wide")
common.apply_css()

client = common.get_client()

if 'editing_result' not in st.session_state:
    st.session_state.editing_result = None
if 'confirm_delete_result' not in st.session_state:
    st.session_state.confirm_delete_result = None

st.title("Riwayat Pertandingan")

common.show_flash()

if st.button("🔄 Refresh"):
    common.refresh("match_results")
    st.rerun()

try:
    results = common.match_results()
except ScrimClientError as exc:
    st.error(f"Gagal memuat hasil pertandingan: {exc.message}")
    st.stop()

summary = views.result_summary(results.records)
col1, col2, col3, col4, col5 = st.columns(5)
col1.metric("Main", summary["played"])
col2.metric("Menang", summary[config.STATUS_WIN])
col3.metric("Kalah", summary[config.STATUS_LOSS])
col4.metric("Seri", summary[config.STATUS_DRAW])
col5.metric("Win Rate", f"{summary['winRate']}%")

col1, col2, col3 = st.columns([2, 1, 1])
search = col1.text_input("Cari lawan, fraksi, atau pencatat")
fraksi = col2.selectbox("Fraksi", [views.ALL, *config.FACTIONS], format_func=lambda v: "Semua" if v == views.ALL else v)
status = col3.selectbox(
    "Status",
    [views.ALL, config.STATUS_WIN, config.STATUS_LOSS, config.STATUS_DRAW],
    format_func=lambda v: "Semua" if v == views.ALL else views.status_label(v),
)

filtered = views.sort_newest_first(views.filter_results(results.records, search, fraksi, status))

if not filtered:
    st.info("Belum ada hasil pertandingan yang cocok.")
    st.stop()


def save_edit(result, rev_score, opponent_score, notes):
    """Validate and send an edit; None means the form stays open with an error."""
    try:
        payload = MatchResultPayload(
            schedule_id=result["scheduleId"],
            fraksi=result["fraksi"],
            rev_score=int(rev_score),
            opponent_score=int(opponent_score),
            notes=notes,
            recorded_by=result["recordedBy"],
        )
    except ValidationError as exc:
        st.error(first_error_message(exc))
        return None

    body = payload.model_dump(by_alias=True)
    changes = {**body, "status": determine_status(payload.rev_score, payload.opponent_score)}
    try:
        with st.spinner("Menyimpan..."):
            results.update(result["id"], changes, lambda: client.update_match_result(result["id"], body))
        common.flash("toast", "Hasil pertandingan diperbarui")
    except ScrimClientError as exc:
        common.flash("error", exc.message)
        return False
    return True


for result in filtered:
    result_id = result["id"]
    label = common.pending_label(results, result_id)
    with st.container(border=True):
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.markdown(views.result_headline_html(result, label), unsafe_allow_html=True)
        col1.caption(f"{result['fraksi']} · dicatat oleh {result['recordedBy']} · {views.format_timestamp(result['timestamp'])}")
        col2.markdown(f"### {views.status_label(result['status'])}")
        if result.get("notes"):
            st.write(result["notes"])

        if result_id is None:
            continue

        if st.session_state.editing_result == result_id:
            with st.form(f"edit_result_{result_id}"):
                e1, e2 = st.columns(2)
                rev_score = e1.number_input(f"Skor {config.TEAM_NAME}", min_value=config.MIN_SCORE, max_value=config.MAX_SCORE, value=int(result["revScore"]), step=1)
                opponent_score = e2.number_input("Skor Lawan", min_value=config.MIN_SCORE, max_value=config.MAX_SCORE, value=int(result["opponentScore"]), step=1)
                notes = st.text_area("Catatan", value=result.get("notes", ""))
                s1, s2 = st.columns(2)
                save = s1.form_submit_button("Simpan")
                cancel = s2.form_submit_button("Batal")
            if save:
                saved = save_edit(result, rev_score, opponent_score, notes)
                if saved is not None:
                    if saved:
                        st.session_state.editing_result = None
                    common.report_dropped(results)
                    st.rerun()
            if cancel:
                st.session_state.editing_result = None
                st.rerun()
            continue

        if col3.button("✏️", key=f"edit_result_btn_{result_id}"):
            st.session_state.editing_result = result_id
            st.rerun()
        if st.session_state.confirm_delete_result == result_id:
            st.warning("Hapus hasil pertandingan ini?")
            yes, no = st.columns(2)
            if yes.button("Ya, hapus", key=f"delete_result_yes_{result_id}"):
                st.session_state.confirm_delete_result = None
                try:
                    results.delete(result_id, lambda: client.delete_match_result(result_id))
                    common.flash("toast", "Hasil pertandingan dihapus")
                except ScrimClientError as exc:
                    common.flash("error", exc.message)
                common.report_dropped(results)
                st.rerun()
            if no.button("Batal", key=f"delete_result_no_{result_id}"):
                st.session_state.confirm_delete_result = None
                st.rerun()
        elif col3.button("🗑️", key=f"delete_result_btn_{result_id}"):
            st.session_state.confirm_delete_result = result_id
            st.rerun()
