import json

import pytest


@pytest.fixture()
def memory_store():
    # Minimal in-memory results document matching the viewer's JSON shape
    store = {
        "seriesData": [
            {
                "id": 1,
                "name": "Summer Series",
                "numberOfRaces": 3,
                "discardThreshold": 0,
                "dncScoringRule": "raceEntries",
                "races": [
                    {
                        "raceNumber": 1,
                        "date": "2025-01-05",
                        "results": [
                            {"sailNumber": "10", "skipper": "Alice", "boatClass": "Laser", "yardstick": 1100,
                             "status": "finished", "position": 1, "points": 1, "elapsedTime": "00:55:00"},
                            {"sailNumber": "2", "skipper": "Bob", "boatClass": "Solo", "yardstick": 1140,
                             "status": "finished", "position": 2, "points": 2, "elapsedTime": "00:57:00"},
                        ],
                    },
                    {
                        "raceNumber": 2,
                        "date": "2025-01-12",
                        "results": [
                            {"sailNumber": "2", "skipper": "Bob", "boatClass": "Solo", "yardstick": 1140,
                             "status": "finished", "position": 1, "points": 1, "elapsedTime": "00:50:00"},
                            {"sailNumber": "10", "skipper": "Alice", "boatClass": "Laser",
                             "status": "DNF", "position": "DNF", "points": 3},
                        ],
                    },
                    {"raceNumber": 3, "results": []},
                ],
            },
            {
                "id": "7",
                "name": "Autumn Series",
                "numberOfRaces": 2,
                "races": [],
            },
        ]
    }
    return store


@pytest.fixture()
def results_file(tmp_path, memory_store):
    path = tmp_path / "latest-results-data.json"
    path.write_text(json.dumps(memory_store))
    return path


@pytest.fixture()
def client(monkeypatch, results_file):
    monkeypatch.setenv("RESULTS_DATA_PATH", str(results_file))
    from sailresults import create_app

    app = create_app()
    app.config.update({"TESTING": True})
    with app.test_client() as c:
        yield c
