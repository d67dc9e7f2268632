from scrim import config, views


def result(id, opponent, fraksi=config.FRAKSI_1, status=config.STATUS_WIN, timestamp="", recorded_by="Budi"):
    return {
        "id": id,
        "scheduleId": 1000 + id,
        "fraksi": fraksi,
        "revScore": 2,
        "opponentScore": 1,
        "status": status,
        "notes": "",
        "recordedBy": recorded_by,
        "timestamp": timestamp,
        "opponent": opponent,
    }


RESULTS = [
    result(1, "Alpha", timestamp="2025-09-10T09:37:16.301Z"),
    result(2, "Bravo", fraksi=config.FRAKSI_2, status=config.STATUS_LOSS, timestamp="2025-09-12T10:00:00.000Z"),
    result(3, "Alpha Prime", status=config.STATUS_DRAW, timestamp="not a date", recorded_by="Sari"),
    result(4, "Charlie", fraksi=config.FRAKSI_2, timestamp="2025-09-11T08:00:00.000Z"),
]


def ids(records):
    return [record["id"] for record in records]


def test_filter_by_search_is_case_insensitive():
    assert ids(views.filter_results(RESULTS, search="alpha")) == [1, 3]
    assert ids(views.filter_results(RESULTS, search="  SARI ")) == [3]
    assert ids(views.filter_results(RESULTS, search="fraksi 2")) == [2, 4]


def test_filter_by_faction_and_status():
    assert ids(views.filter_results(RESULTS, fraksi=config.FRAKSI_2)) == [2, 4]
    assert ids(views.filter_results(RESULTS, status=config.STATUS_WIN)) == [1, 4]
    assert ids(views.filter_results(RESULTS, fraksi=config.FRAKSI_2, status=config.STATUS_WIN)) == [4]
    assert views.filter_results(RESULTS, search="zulu") == []


def test_filter_keeps_record_shape():
    assert views.filter_results(RESULTS[:1]) == RESULTS[:1]
    assert views.filter_results([]) == []


def test_sort_newest_first_puts_unparseable_last():
    unknown = result(5, "Delta")
    assert ids(views.sort_newest_first(RESULTS + [unknown])) == [2, 4, 1, 3, 5]
    assert views.sort_newest_first([]) == []


def test_format_timestamp():
    assert views.format_timestamp("2025-09-10T09:37:16.301Z") == "10 Sep 2025, 09:37"
    assert views.format_timestamp("") == "Unknown date"
    assert views.format_timestamp("kemarin") == "kemarin"


def test_format_date_and_time():
    assert views.format_date("2025-10-01") == "01 Oct 2025"
    assert views.format_date("") == "Tanggal tidak tersedia"
    assert views.format_date("1 Oktober") == "1 Oktober"
    assert views.format_time("19:00") == "19:00"
    assert views.format_time("") == "Waktu tidak tersedia"


def test_status_labels():
    assert views.status_label(config.STATUS_WIN) == "MENANG"
    assert views.status_label(config.STATUS_LOSS) == "KALAH"
    assert views.status_label(config.STATUS_DRAW) == "SERI"
    assert views.status_label("forfeit") == "FORFEIT"


def test_with_fraksi_tags_copies():
    schedules = [{"id": 1001, "lawan": "Alpha"}]
    tagged = views.with_fraksi(schedules, config.FRAKSI_1)
    assert tagged == [{"id": 1001, "lawan": "Alpha", "fraksi": config.FRAKSI_1}]
    assert "fraksi" not in schedules[0]


def test_result_summary():
    summary = views.result_summary(RESULTS)
    assert summary == {
        config.STATUS_WIN: 2,
        config.STATUS_LOSS: 1,
        config.STATUS_DRAW: 1,
        "played": 4,
        "winRate": 50.0,
    }
    assert views.result_summary([])["winRate"] == 0.0


def test_html_snippets_escape_stored_text():
    record = {"playerName": "<img src=x onerror=alert(1)>", "reason": "a & b"}
    line = views.unavailable_html(record, "⏳ saving")
    assert "<img" not in line
    assert "&lt;img src=x onerror=alert(1)&gt;" in line
    assert "a &amp; b" in line
    assert line.endswith("<span class='pending'>⏳ saving</span>")

    chip = views.scrim_chip_html({"startMatch": "19:00", "lawan": "<b>Alpha</b>", "fraksi": config.FRAKSI_1})
    assert chip == "<div class='scrim-chip'>19:00 vs &lt;b&gt;Alpha&lt;/b&gt; (Fraksi 1)</div>"

    headline = views.result_headline_html(result(1, "<script>x</script>"))
    assert "<script>" not in headline
    assert "&lt;script&gt;x&lt;/script&gt;" in headline
    assert views.result_headline_html(result(1, "")).startswith(f"**{config.TEAM_NAME} 2 - 1 Unknown**")
