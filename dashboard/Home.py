import io

import qrcode
import streamlit as st
from pydantic import ValidationError

from scrim import config
from scrim.client import ScrimClientError
from scrim.models import ScrimForm, first_error_message

import common

st.set_page_config(page_title=f"{config.TEAM_NAME} Scrim Scheduler", layout="wide", initial_sidebar_state="collapsed")
common.apply_css()

client = common.get_client()

st.title(f"{config.TEAM_NAME} Scrim Scheduler")
st.write("Atur jadwal scrim, kehadiran pemain, dan hasil pertandingan untuk kedua fraksi.")
st.markdown('1. <a href="Schedule" target="_self">**Schedule**</a> - Jadwal per fraksi, kehadiran, dan input hasil', unsafe_allow_html=True)
st.markdown('2. <a href="Match_History" target="_self">**Match History**</a> - Riwayat hasil pertandingan', unsafe_allow_html=True)
st.markdown('3. <a href="Calendar" target="_self">**Calendar**</a> - Kalender bulanan semua scrim', unsafe_allow_html=True)

st.markdown("---")
st.subheader("Tambah Jadwal Scrim")

with st.form("scrim_form", clear_on_submit=True):
    col1, col2 = st.columns(2)
    with col1:
        fraksi = st.radio("Fraksi", config.FACTIONS, horizontal=True)
        tanggal = st.date_input("Tanggal Scrim")
        lawan = st.text_input("Lawan")
    with col2:
        maps = st.multiselect("Map", config.MAP_OPTIONS)
        start = st.time_input("Start Match", step=900)
    submitted = st.form_submit_button("Simpan Jadwal")

if submitted:
    try:
        form = ScrimForm(
            fraksi=fraksi,
            tanggal_scrim=tanggal.strftime("%Y-%m-%d") if tanggal else "",
            lawan=lawan.strip(),
            map=maps,
            start_match=start.strftime("%H:%M") if start else "",
        )
    except ValidationError as exc:
        st.error(first_error_message(exc))
    else:
        payload = form.model_dump(by_alias=True)
        local = {
            "id": None,
            "tanggalScrim": form.tanggal_scrim,
            "lawan": form.lawan,
            "map": config.MAP_SEPARATOR.join(form.map),
            "startMatch": form.start_match,
        }
        synced = common.schedules(fraksi)
        try:
            with st.spinner("Menyimpan jadwal..."):
                synced.create(local, lambda: client.append_schedule(payload))
            st.success(f"Jadwal vs {form.lawan} untuk {fraksi} tersimpan!")
        except ScrimClientError as exc:
            st.error(f"Gagal menyimpan jadwal: {exc.message}")
        common.report_dropped(synced)

# Add QR code section
st.markdown("---")
st.subheader("Quick Access")
st.write("Scan this code to open the scheduler on another device:")

qr = qrcode.QRCode(version=1, box_size=10, border=5)
qr.add_data(config.DASHBOARD_URL)
qr.make(fit=True)
img = qr.make_image(fill_color="black", back_color="white")

img_byte_arr = io.BytesIO()
img.save(img_byte_arr, format='PNG')

col1, col2, col3 = st.columns([1, 2, 1])
with col2:
    st.image(img_byte_arr.getvalue())
    st.code(config.DASHBOARD_URL, language="text")
