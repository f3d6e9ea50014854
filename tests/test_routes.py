import json
import logging


def test_series_index_sorted_by_name(client):
    resp = client.get("/api/series")
    assert resp.status_code == 200
    assert [s["name"] for s in resp.get_json()["series"]] == ["Autumn Series", "Summer Series"]


def test_index_redirects_to_series_list(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/api/series")


def test_standings_payload(client):
    resp = client.get("/api/series/1/standings")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["seriesName"] == "Summer Series"
    assert data["racesPlanned"] == 3
    assert data["racesCompleted"] == 2
    assert data["discardRule"] == "None"
    assert data["discardsApplied"] == 0
    rows = data["competitors"]
    assert [(r["position"], r["sailNumber"], r["netPoints"]) for r in rows] == [(1, "2", 3), (2, "10", 4)]
    alice = rows[1]
    assert [c["status"] for c in alice["raceScores"]] == ["FINISHED", "DNF", "NR"]
    assert alice["raceScores"][2]["points"] is None


def test_standings_missing_series_reports_unavailable(client, caplog):
    caplog.set_level("WARNING")
    resp = client.get("/api/series/99/standings")
    assert resp.status_code == 404
    assert resp.get_json()["status"] == "unavailable"
    assert any("Series not found" in r.getMessage() for r in caplog.records)


def test_series_with_no_races_has_empty_standings(client):
    resp = client.get("/api/series/7/standings")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["competitors"] == []
    assert data["racesCompleted"] == 0


def test_series_races_lists_planned_races(client):
    resp = client.get("/api/series/1/races")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["defaultRace"] == 2
    assert [r["hasResults"] for r in data["races"]] == [True, True, False]
    assert data["series"]["racesCompleted"] == 2


def test_race_results_sorted_with_corrected_times(client):
    resp = client.get("/api/series/1/races/2")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["race"]["date"] == "2025-01-12"
    assert data["race"]["entries"] == 2
    results = data["results"]
    assert [r["sailNumber"] for r in results] == ["2", "10"]
    # 3000s elapsed on yardstick 1140
    assert results[0]["correctedTime"] == "00:04:23"
    assert results[1]["correctedTime"] is None


def test_unsailed_race_has_no_results(client):
    resp = client.get("/api/series/1/races/3")
    assert resp.status_code == 200
    assert resp.get_json()["results"] == []


def test_race_outside_series_not_found(client):
    resp = client.get("/api/series/1/races/9")
    assert resp.status_code == 404


def test_malformed_document_reported(client, results_file):
    results_file.write_text(json.dumps({"series": []}))
    resp = client.get("/api/series/1/standings")
    assert resp.status_code == 503
    assert resp.get_json()["status"] == "error"


def test_document_reloaded_each_request(client, results_file, memory_store):
    memory_store["seriesData"][0]["name"] = "Renamed"
    results_file.write_text(json.dumps(memory_store))
    resp = client.get("/api/series/1/standings")
    assert resp.get_json()["seriesName"] == "Renamed"


def test_health(client, results_file):
    assert client.get("/health").get_json() == {"ok": True, "status": "ok", "series": 2}
    results_file.unlink()
    resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.get_json()["ok"] is False


def test_app_starts_without_document(monkeypatch, tmp_path, caplog):
    monkeypatch.setenv("RESULTS_DATA_PATH", str(tmp_path / "missing.json"))
    from sailresults import create_app

    caplog.set_level(logging.ERROR)
    app = create_app()
    assert app.config["RESULTS_DATA_PATH"].endswith("missing.json")
    assert any("could not be loaded" in r.getMessage() for r in caplog.records)


def test_undecodable_document_reported(client, results_file):
    results_file.write_bytes(b'{"seriesData": [{"id": 1, "name": "\xff", "numberOfRaces": 1}]}')
    resp = client.get("/api/series/1/standings")
    assert resp.status_code == 503
    assert resp.get_json()["status"] == "error"


def test_app_starts_with_undecodable_document(monkeypatch, tmp_path, caplog):
    path = tmp_path / "latest-results-data.json"
    path.write_bytes(b'{"seriesData": [{"id": 1, "name": "\xff", "numberOfRaces": 1}]}')
    monkeypatch.setenv("RESULTS_DATA_PATH", str(path))
    from sailresults import create_app

    caplog.set_level(logging.ERROR)
    app = create_app()
    assert any("could not be loaded" in r.getMessage() for r in caplog.records)
    resp = app.test_client().get("/health")
    assert resp.status_code == 503


def test_directory_as_document_reported(monkeypatch, tmp_path):
    monkeypatch.setenv("RESULTS_DATA_PATH", str(tmp_path))
    from sailresults import create_app

    app = create_app()
    resp = app.test_client().get("/api/series")
    assert resp.status_code == 503
