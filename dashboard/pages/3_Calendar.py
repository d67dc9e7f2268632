import datetime as dt

import streamlit as st

from scrim import config, views
from scrim.calendar_utils import google_calendar_url, matches_for_date, month_days, shift_month
from scrim.client import ScrimClientError

import common

st.set_page_config(page_title=f"Calendar - {config.TEAM_NAME} Scrim", layout="wide")
common.apply_css()

st.markdown("""
    <style>
    .day-cell {
        min-height: 90px;
        border: 1px solid #e5e7eb;
        border-radius: 6px;
        padding: 4px 6px;
        font-size: 0.85em;
    }
    .day-today {
        border-color: #2563eb;
    }
    .scrim-chip {
        background: #eef2ff;
        border-radius: 4px;
        margin-top: 2px;
        padding: 1px 4px;
    }
    </style>
""", unsafe_allow_html=True)

WEEKDAYS = ["Sen", "Sel", "Rab", "Kam", "Jum", "Sab", "Min"]

if 'calendar_month' not in st.session_state:
    st.session_state.calendar_month = dt.date.today().replace(day=1)

st.title("Kalender Scrim")

all_schedules = []
for fraksi in config.FACTIONS:
    try:
        all_schedules.extend(views.with_fraksi(common.schedules(fraksi).records, fraksi))
    except ScrimClientError as exc:
        st.error(f"Gagal memuat jadwal {fraksi}: {exc.message}")

month = st.session_state.calendar_month
col1, col2, col3 = st.columns([1, 3, 1])
if col1.button("◀ Sebelumnya"):
    st.session_state.calendar_month = shift_month(month, -1)
    st.rerun()
col2.markdown(f"<h3 style='text-align: center'>{month.strftime('%B %Y')}</h3>", unsafe_allow_html=True)
if col3.button("Berikutnya ▶"):
    st.session_state.calendar_month = shift_month(month, 1)
    st.rerun()

header = st.columns(7)
for col, name in zip(header, WEEKDAYS):
    col.markdown(f"**{name}**")

days = month_days(month)
today = dt.date.today()
# Leading blanks so the first day lands under its weekday
cells = [None] * days[0].weekday() + days
for week_start in range(0, len(cells), 7):
    columns = st.columns(7)
    for col, day in zip(columns, cells[week_start:week_start + 7]):
        if day is None:
            continue
        chips = "".join(
            views.scrim_chip_html(s)
            for s in sorted(matches_for_date(all_schedules, day), key=lambda s: s["startMatch"])
        )
        css_class = "day-cell day-today" if day == today else "day-cell"
        col.markdown(f"<div class='{css_class}'><b>{day.day}</b>{chips}</div>", unsafe_allow_html=True)

st.markdown("---")
st.subheader("Scrim bulan ini")
month_schedules = sorted(
    (s for day in days for s in matches_for_date(all_schedules, day)),
    key=lambda s: (s["tanggalScrim"], s["startMatch"]),
)
if not month_schedules:
    st.info("Tidak ada scrim di bulan ini.")
for schedule in month_schedules:
    col1, col2 = st.columns([3, 1])
    col1.write(
        f"**{views.format_date(schedule['tanggalScrim'])} {views.format_time(schedule['startMatch'])}** · "
        f"vs {schedule['lawan']} · {schedule['fraksi']} · {schedule['map']}"
    )
    col2.link_button("📅 Google Calendar", google_calendar_url(schedule, schedule["fraksi"]))
