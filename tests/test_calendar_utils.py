from datetime import date, datetime
from urllib.parse import parse_qs, urlparse

from scrim import config
from scrim.calendar_utils import (
    GOOGLE_CALENDAR_FALLBACK,
    google_calendar_url,
    is_match_completed,
    matches_for_date,
    month_days,
    schedule_start,
    shift_month,
)

SCRIM = {"id": 1001, "tanggalScrim": "2025-10-01", "lawan": "Alpha", "map": "Cyclone", "startMatch": "19:00"}


def test_month_days():
    assert len(month_days(date(2024, 2, 15))) == 29
    assert len(month_days(date(2025, 2, 1))) == 28
    days = month_days(date(2025, 10, 20))
    assert days[0] == date(2025, 10, 1)
    assert days[-1] == date(2025, 10, 31)


def test_shift_month_crosses_years():
    assert shift_month(date(2025, 1, 1), -1) == date(2024, 12, 1)
    assert shift_month(date(2025, 12, 1), 1) == date(2026, 1, 1)
    assert shift_month(date(2025, 10, 1), 12) == date(2026, 10, 1)


def test_matches_for_date():
    other = {**SCRIM, "id": 2001, "tanggalScrim": "2025-10-02"}
    assert matches_for_date([SCRIM, other], date(2025, 10, 1)) == [SCRIM]
    assert matches_for_date([SCRIM, other], date(2025, 10, 3)) == []


def test_schedule_start():
    assert schedule_start(SCRIM) == datetime(2025, 10, 1, 19, 0)
    assert schedule_start({**SCRIM, "startMatch": "25:00"}) is None
    assert schedule_start({**SCRIM, "startMatch": "19"}) is None
    assert schedule_start({**SCRIM, "tanggalScrim": "01/10/2025"}) is None
    assert schedule_start({}) is None


def test_match_completes_after_duration():
    assert not is_match_completed(SCRIM, now=datetime(2025, 10, 1, 21, 0))
    assert is_match_completed(SCRIM, now=datetime(2025, 10, 1, 21, 1))
    assert not is_match_completed({**SCRIM, "startMatch": ""}, now=datetime(2030, 1, 1))


def test_google_calendar_url():
    url = google_calendar_url(SCRIM, config.FRAKSI_1)
    parsed = urlparse(url)
    query = parse_qs(parsed.query)

    assert url.startswith("https://calendar.google.com/calendar/render?")
    assert "%20" in url
    assert query["action"] == ["TEMPLATE"]
    assert query["text"] == [f"{config.TEAM_NAME} vs Alpha ({config.FRAKSI_1})"]
    start, end = query["dates"][0].split("/")
    assert start.startswith("20251001T190000")
    assert end.startswith("20251001T210000")
    assert "Map: Cyclone" in query["details"][0]
    assert query["location"] == ["Online Scrim Match"]


def test_google_calendar_url_for_malformed_schedule():
    assert google_calendar_url({**SCRIM, "tanggalScrim": ""}, config.FRAKSI_2) == GOOGLE_CALENDAR_FALLBACK
