import datetime as dt

import streamlit as st
from pydantic import ValidationError

from scrim import config, views
from scrim.calendar_utils import google_calendar_url, is_match_completed
from scrim.client import ScrimClientError
from scrim.models import MatchResultPayload, ScrimForm, determine_status, first_error_message

import common

st.set_page_config(page_title=f"Schedule - {config.TEAM_NAME} Scrim", layout="wide")
common.apply_css()

client = common.get_client()

# Initialize session states
if 'editing_schedule' not in st.session_state:
    st.session_state.editing_schedule = None
if 'confirm_delete' not in st.session_state:
    st.session_state.confirm_delete = None

st.title("Jadwal Scrim")

if st.button("🔄 Refresh"):
    common.refresh(*[f"schedules_{f}" for f in config.FACTIONS],
                   *[f"attendance_{f}" for f in config.FACTIONS],
                   "match_results")
    st.rerun()

common.show_flash()

player_name = st.text_input("Nama kamu", value=common.remembered_name(), key="player_name")


def run_write(action, success_message, synced):
    """Run an optimistic write, reporting the outcome in the page."""
    try:
        with st.spinner("Menyimpan..."):
            action()
        common.flash("toast", success_message)
    except ScrimClientError as exc:
        common.flash("error", exc.message)
    common.report_dropped(synced)


def edit_form(schedule, fraksi, synced):
    key = f"{fraksi}_{schedule['id']}"
    with st.form(f"edit_{key}"):
        try:
            current_date = dt.datetime.strptime(schedule["tanggalScrim"], "%Y-%m-%d").date()
        except ValueError:
            current_date = dt.date.today()
        try:
            current_time = dt.datetime.strptime(schedule["startMatch"], "%H:%M").time()
        except ValueError:
            current_time = dt.time(19, 0)
        current_maps = [m for m in schedule["map"].split(config.MAP_SEPARATOR) if m in config.MAP_OPTIONS]

        tanggal = st.date_input("Tanggal Scrim", value=current_date)
        lawan = st.text_input("Lawan", value=schedule["lawan"])
        maps = st.multiselect("Map", config.MAP_OPTIONS, default=current_maps)
        start = st.time_input("Start Match", value=current_time, step=900)

        col1, col2 = st.columns(2)
        save = col1.form_submit_button("Simpan")
        cancel = col2.form_submit_button("Batal")

    if cancel:
        st.session_state.editing_schedule = None
        st.rerun()
    if not save:
        return

    try:
        form = ScrimForm(
            fraksi=fraksi,
            tanggal_scrim=tanggal.strftime("%Y-%m-%d"),
            lawan=lawan.strip(),
            map=maps,
            start_match=start.strftime("%H:%M"),
        )
    except ValidationError as exc:
        st.error(first_error_message(exc))
        return

    changes = {
        "tanggalScrim": form.tanggal_scrim,
        "lawan": form.lawan,
        "map": config.MAP_SEPARATOR.join(form.map),
        "startMatch": form.start_match,
    }
    payload = form.model_dump(by_alias=True)
    run_write(
        lambda: synced.update(schedule["id"], changes, lambda: client.update_schedule(schedule["id"], payload)),
        "Jadwal diperbarui",
        synced,
    )
    st.session_state.editing_schedule = None
    st.rerun()


def attendance_section(schedule, fraksi, synced):
    records = [
        record for record in synced.records
        if record.get("scheduleId") == schedule["id"] and record.get("fraksi") == fraksi
    ]
    if records:
        st.write(f"**Tidak bisa hadir ({len(records)}):**")
        for record in records:
            col1, col2 = st.columns([4, 1])
            label = common.pending_label(synced, synced.collection.key_func(record))
            col1.markdown(views.unavailable_html(record, label), unsafe_allow_html=True)
            if record.get("playerName", "").strip().lower() == player_name.strip().lower():
                if col2.button("Saya bisa hadir", key=f"available_{fraksi}_{schedule['id']}_{record['playerName']}"):
                    run_write(
                        lambda: synced.delete(
                            synced.collection.key_func(record),
                            lambda: client.mark_available(schedule["id"], fraksi, record["playerName"]),
                        ),
                        "Kehadiran diperbarui",
                        synced,
                    )
                    st.rerun()
    else:
        st.caption("Semua pemain bisa hadir.")

    with st.form(f"unavailable_{fraksi}_{schedule['id']}", clear_on_submit=True):
        reason = st.text_input("Alasan (opsional)")
        submitted = st.form_submit_button("Saya tidak bisa hadir")
    if submitted:
        name = player_name.strip()
        if not name:
            st.error("Player name is required")
            return
        common.remember_name(name)
        local = {
            "id": None,
            "scheduleId": schedule["id"],
            "fraksi": fraksi,
            "playerName": name,
            "status": config.STATUS_UNAVAILABLE,
            "reason": reason.strip(),
            "timestamp": "",
        }
        run_write(
            lambda: synced.create(local, lambda: client.mark_unavailable(schedule["id"], fraksi, name, reason.strip() or None)),
            "Ketidakhadiran dicatat",
            synced,
        )
        st.rerun()


def result_section(schedule, fraksi, results):
    existing = [
        record for record in results.records
        if record.get("scheduleId") == schedule["id"] and record.get("fraksi") == fraksi
    ]
    if existing:
        result = existing[0]
        st.write(
            f"**Hasil:** {config.TEAM_NAME} {result['revScore']} - {result['opponentScore']} {schedule['lawan']} "
            f"({views.status_label(result['status'])})"
        )
        if result.get("notes"):
            st.caption(result["notes"])
        return

    if not is_match_completed(schedule):
        st.caption("Hasil bisa diinput setelah pertandingan selesai.")
        return

    with st.form(f"result_{fraksi}_{schedule['id']}"):
        col1, col2 = st.columns(2)
        rev_score = col1.number_input(f"Skor {config.TEAM_NAME}", min_value=config.MIN_SCORE, max_value=config.MAX_SCORE, step=1)
        opponent_score = col2.number_input("Skor Lawan", min_value=config.MIN_SCORE, max_value=config.MAX_SCORE, step=1)
        notes = st.text_area("Catatan")
        submitted = st.form_submit_button("Simpan Hasil")
    if not submitted:
        return

    try:
        payload = MatchResultPayload(
            schedule_id=schedule["id"],
            fraksi=fraksi,
            rev_score=int(rev_score),
            opponent_score=int(opponent_score),
            notes=notes,
            recorded_by=player_name,
        )
    except ValidationError as exc:
        st.error(first_error_message(exc))
        return

    common.remember_name(payload.recorded_by)
    body = payload.model_dump(by_alias=True)
    local = {
        **body,
        "id": None,
        "status": determine_status(payload.rev_score, payload.opponent_score),
        "timestamp": "",
        "opponent": schedule["lawan"],
    }
    run_write(
        lambda: results.create(local, lambda: client.create_match_result(body)),
        "Hasil pertandingan tersimpan",
        results,
    )
    st.rerun()


def schedule_card(schedule, fraksi, synced, attendance, results):
    key = f"{fraksi}_{schedule['id']}"
    label = common.pending_label(synced, schedule["id"])
    title = (
        f"vs {schedule['lawan']} · {views.format_date(schedule['tanggalScrim'])} · "
        f"{views.format_time(schedule['startMatch'])} {label}"
    )
    with st.expander(title, expanded=st.session_state.editing_schedule == key):
        if st.session_state.editing_schedule == key:
            edit_form(schedule, fraksi, synced)
            return

        st.write(f"**Map:** {schedule['map'] or '-'}")
        col1, col2, col3 = st.columns(3)
        col1.link_button("📅 Tambah ke Google Calendar", google_calendar_url(schedule, fraksi))
        if schedule["id"] is not None:
            if col2.button("✏️ Edit", key=f"edit_btn_{key}"):
                st.session_state.editing_schedule = key
                st.rerun()
            if st.session_state.confirm_delete == key:
                col3.warning("Hapus jadwal ini?")
                yes, no = col3.columns(2)
                if yes.button("Ya", key=f"delete_yes_{key}"):
                    st.session_state.confirm_delete = None
                    run_write(
                        lambda: synced.delete(schedule["id"], lambda: client.delete_schedule(schedule["id"], fraksi)),
                        "Jadwal dihapus",
                        synced,
                    )
                    st.rerun()
                if no.button("Tidak", key=f"delete_no_{key}"):
                    st.session_state.confirm_delete = None
                    st.rerun()
            elif col3.button("🗑️ Hapus", key=f"delete_btn_{key}"):
                st.session_state.confirm_delete = key
                st.rerun()

            st.markdown("---")
            attendance_section(schedule, fraksi, attendance)
            st.markdown("---")
            result_section(schedule, fraksi, results)


tabs = st.tabs(list(config.FACTIONS))
for tab, fraksi in zip(tabs, config.FACTIONS):
    with tab:
        try:
            synced = common.schedules(fraksi)
            attendance = common.attendance(fraksi)
            results = common.match_results()
        except ScrimClientError as exc:
            st.error(f"Gagal memuat data: {exc.message}")
            continue

        if not synced.records:
            st.info(f"Belum ada jadwal untuk {fraksi}.")
            continue

        for schedule in sorted(synced.records, key=lambda s: (s["tanggalScrim"], s["startMatch"])):
            schedule_card(schedule, fraksi, synced, attendance, results)
