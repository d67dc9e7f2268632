import os

# Team Settings
TEAM_NAME = "REV"
MATCH_DURATION_HOURS = 2  # Used for calendar events and the "completed" check

# Google Sheets Configuration
SPREADSHEET_ID = os.getenv("GOOGLE_SHEETS_ID", "")
SCOPES = ['https://www.googleapis.com/auth/spreadsheets']
CREDENTIALS_FILE = os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json")

# Factions
FRAKSI_1 = "Fraksi 1"
FRAKSI_2 = "Fraksi 2"
FACTIONS = (FRAKSI_1, FRAKSI_2)

# Synthetic schedule id offsets, one per faction tab
FRAKSI_OFFSETS = {
    FRAKSI_1: 1000,
    FRAKSI_2: 2000,
}
OFFSET_SPAN = 1000

# Sheet Names
SHEET_ATTENDANCE = "Attendance"
SHEET_MATCH_RESULTS = "Match Results"

# Column Names
# Schedule Sheets (one per faction)
COL_TANGGAL_SCRIM = "Tanggal Scrim"
COL_LAWAN = "Lawan"
COL_MAP = "Map"
COL_START_MATCH = "Start Match"

# Attendance Sheet
COL_SCHEDULE_ID = "Schedule ID"
COL_FRAKSI = "Fraksi"
COL_PLAYER_NAME = "Player Name"
COL_STATUS = "Status"
COL_REASON = "Reason"
COL_TIMESTAMP = "Timestamp"

# Match Results Sheet
COL_REV_SCORE = "REV Score"
COL_OPPONENT_SCORE = "Opponent Score"
COL_NOTES = "Notes"
COL_RECORDED_BY = "Recorded By"

SCHEDULE_HEADER = [COL_TANGGAL_SCRIM, COL_LAWAN, COL_MAP, COL_START_MATCH]
ATTENDANCE_HEADER = [
    COL_SCHEDULE_ID,
    COL_FRAKSI,
    COL_PLAYER_NAME,
    COL_STATUS,
    COL_REASON,
    COL_TIMESTAMP
]
MATCH_RESULTS_HEADER = [
    COL_SCHEDULE_ID,
    COL_FRAKSI,
    COL_REV_SCORE,
    COL_OPPONENT_SCORE,
    COL_STATUS,
    COL_NOTES,
    COL_RECORDED_BY,
    COL_TIMESTAMP
]

SHEET_HEADERS = {
    FRAKSI_1: SCHEDULE_HEADER,
    FRAKSI_2: SCHEDULE_HEADER,
    SHEET_ATTENDANCE: ATTENDANCE_HEADER,
    SHEET_MATCH_RESULTS: MATCH_RESULTS_HEADER,
}

# Attendance Status Values
STATUS_UNAVAILABLE = "unavailable"

# Match Status Values
STATUS_WIN = "win"
STATUS_LOSS = "loss"
STATUS_DRAW = "draw"

STATUS_LABELS = {
    STATUS_WIN: "MENANG",
    STATUS_LOSS: "KALAH",
    STATUS_DRAW: "SERI",
}

# Scores
MIN_SCORE = 0
MAX_SCORE = 99

# Map pool offered by the schedule form
MAP_OPTIONS = [
    "Ascension",
    "Threshold",
    "Cracked",
    "Knife Edge",
    "Trench Lines",
    "Cyclone",
    "Shafted",
    "Trainwreck"
]
MAP_SEPARATOR = ", "

# API Settings
CACHE_TTL_SECONDS = 30
CACHE_CAPACITY = 10
SCHEDULE_CACHE_CONTROL = "public, s-maxage=30, stale-while-revalidate=60"
ATTENDANCE_CACHE_CONTROL = "public, s-maxage=10, stale-while-revalidate=30"
RESULTS_CACHE_CONTROL = "public, s-maxage=30, stale-while-revalidate=60"

# Client Settings
API_URL = os.getenv("SCRIM_API_URL", "http://localhost:8000")
DASHBOARD_URL = os.getenv("SCRIM_DASHBOARD_URL", "http://localhost:8501/")
READ_TIMEOUT = 10  # seconds
WRITE_TIMEOUT = 15  # seconds
RECONCILE_DELAY = 1.0  # seconds to wait for the sheet to settle after a write
MAX_RECONCILE_ATTEMPTS = 3

LOG_LEVEL = os.getenv("SCRIM_LOG_LEVEL", "INFO")
