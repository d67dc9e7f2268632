import calendar
import logging
from datetime import date, datetime, timedelta
from urllib.parse import quote, urlencode

from . import config

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
GOOGLE_CALENDAR_FALLBACK = "https://calendar.google.com/calendar"


def month_days(month):
    """Every date in the month containing `month`."""
    _, last_day = calendar.monthrange(month.year, month.month)
    return [date(month.year, month.month, day) for day in range(1, last_day + 1)]


def shift_month(month, delta):
    index = month.year * 12 + (month.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def matches_for_date(schedules, day):
    """Schedules (already tagged with their fraksi) that fall on `day`."""
    day_str = day.strftime("%Y-%m-%d")
    return [schedule for schedule in schedules if schedule.get("tanggalScrim") == day_str]


def schedule_start(schedule):
    """Local start datetime of a scrim, or None if date or time is malformed."""
    try:
        scrim_date = datetime.strptime(schedule.get("tanggalScrim", ""), "%Y-%m-%d")
        hours, minutes = (int(part) for part in schedule.get("startMatch", "").split(":"))
        return scrim_date.replace(hour=hours, minute=minutes)
    except ValueError:
        return None


def is_match_completed(schedule, now=None):
    """A scrim counts as played once its expected duration has passed."""
    start = schedule_start(schedule)
    if start is None:
        return False
    now = now or datetime.now()
    return now > start + timedelta(hours=config.MATCH_DURATION_HOURS)


def _google_date(moment):
    # Local time with explicit offset so Google keeps the wall-clock time
    return moment.strftime("%Y%m%dT%H%M%S") + moment.astimezone().strftime("%z")


def google_calendar_url(schedule, fraksi):
    start = schedule_start(schedule)
    if start is None:
        logger.warning("Cannot build calendar link for schedule %s", schedule.get("id"))
        return GOOGLE_CALENDAR_FALLBACK
    end = start + timedelta(hours=config.MATCH_DURATION_HOURS)

    lawan = schedule.get("lawan") or "TBD"
    title = f"{config.TEAM_NAME} vs {lawan} ({fraksi})"
    details = "<br>".join([
        f"Tanggal: {start.strftime('%A, %B %d, %Y')}",
        f"Waktu: {start.strftime('%I:%M %p').lstrip('0')}",
        "",
        "DETAIL PERTANDINGAN",
        f"Tim: {config.TEAM_NAME} Team ({fraksi})",
        f"Lawan: {lawan}",
        f"Map: {schedule.get('map') or 'TBD'}",
        "",
        "CATATAN",
        "• Harap online 15 menit sebelum pertandingan",
        "• Periksa Discord untuk komunikasi tim",
        "",
        f"Ditambahkan dari {config.TEAM_NAME} Scrim Scheduler",
    ])
    params = {
        "action": "TEMPLATE",
        "text": title,
        "dates": f"{_google_date(start)}/{_google_date(end)}",
        "details": details,
        "location": "Online Scrim Match",
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params, quote_via=quote)}"
