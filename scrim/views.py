import html

import pandas as pd

from . import config

RESULT_COLUMNS = [
    "id", "scheduleId", "fraksi", "revScore", "opponentScore",
    "status", "notes", "recordedBy", "timestamp", "opponent"
]

ALL = "all"


def results_frame(records):
    """DataFrame of match results with every expected column present."""
    df = pd.DataFrame(list(records))
    for column in RESULT_COLUMNS:
        if column not in df.columns:
            df[column] = ""
    return df


def _records(df):
    return df.drop(columns=[c for c in df.columns if c.startswith("_")]).to_dict("records")


def filter_results(records, search="", fraksi=ALL, status=ALL):
    """Filter match results by free text (opponent, faction, recorder), faction and status."""
    df = results_frame(records)
    if df.empty:
        return []

    mask = pd.Series(True, index=df.index)
    term = search.strip().lower()
    if term:
        text_match = pd.Series(False, index=df.index)
        for column in ("opponent", "fraksi", "recordedBy"):
            text_match |= df[column].fillna("").astype(str).str.lower().str.contains(term, regex=False)
        mask &= text_match
    if fraksi != ALL:
        mask &= df["fraksi"] == fraksi
    if status != ALL:
        mask &= df["status"] == status
    return _records(df[mask])


def parse_timestamp(value):
    """Parse a sheet timestamp to a UTC pandas Timestamp, or NaT."""
    if value is None or str(value).strip() == "":
        return pd.NaT
    return pd.to_datetime(str(value).strip(), errors="coerce", utc=True)


def sort_newest_first(records):
    """Newest results first; rows whose timestamp cannot be parsed go last in their original order."""
    df = results_frame(records)
    if df.empty:
        return []
    df["_ts"] = pd.to_datetime(df["timestamp"].map(parse_timestamp), utc=True)
    df = df.sort_values(by="_ts", ascending=False, na_position="last", kind="stable")
    return _records(df)


def format_timestamp(value):
    if not value:
        return "Unknown date"
    parsed = parse_timestamp(value)
    if pd.isna(parsed):
        return value
    return parsed.strftime("%d %b %Y, %H:%M")


def format_date(value):
    if not value:
        return "Tanggal tidak tersedia"
    parsed = pd.to_datetime(value, format="%Y-%m-%d", errors="coerce")
    if pd.isna(parsed):
        return value
    return parsed.strftime("%d %b %Y")


def format_time(value):
    return value or "Waktu tidak tersedia"


def status_label(status):
    return config.STATUS_LABELS.get(status, str(status).upper())


def with_fraksi(schedules, fraksi):
    return [{**schedule, "fraksi": fraksi} for schedule in schedules]


def result_summary(records):
    """Win/loss/draw counts and win rate (percent, one decimal) of a list of results."""
    df = results_frame(records)
    counts = df["status"].value_counts() if not df.empty else pd.Series(dtype=int)
    summary = {
        config.STATUS_WIN: int(counts.get(config.STATUS_WIN, 0)),
        config.STATUS_LOSS: int(counts.get(config.STATUS_LOSS, 0)),
        config.STATUS_DRAW: int(counts.get(config.STATUS_DRAW, 0)),
    }
    played = sum(summary.values())
    summary["played"] = played
    summary["winRate"] = round(summary[config.STATUS_WIN] * 100 / played, 1) if played else 0.0
    return summary


# Raw HTML snippets for st.markdown(unsafe_allow_html=True); stored text is escaped

def unavailable_html(record, label=""):
    reason = f" - {html.escape(record['reason'])}" if record.get("reason") else ""
    return f"❌ {html.escape(record['playerName'])}{reason} <span class='pending'>{label}</span>"


def scrim_chip_html(schedule):
    return (
        f"<div class='scrim-chip'>{html.escape(schedule['startMatch'])} vs "
        f"{html.escape(schedule['lawan'])} ({html.escape(schedule['fraksi'])})</div>"
    )


def result_headline_html(result, label=""):
    opponent = html.escape(result.get("opponent") or "Unknown")
    return (
        f"**{config.TEAM_NAME} {result['revScore']} - {result['opponentScore']} {opponent}** "
        f"<span class='pending'>{label}</span>"
    )
