import json

import pytest

from flat_ledger_api.app.core.errors import LedgerError
from flat_ledger_api.app.core.ledger import SqliteLedger


def _invoke(client, function, *args):
    return client.post("/api/v1/chaincode/invoke", json={"function": function, "args": list(args)})


def test_seed_and_query_over_http(client):
    resp = _invoke(client, "seedInitialData")
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = _invoke(client, "query", "1")
    assert resp.status_code == 200
    flat = json.loads(resp.json()["payload"])
    assert flat["holder"] == "Marjan"
    assert flat["condition"] == "923F"


def test_list_all_over_http(client):
    _invoke(client, "seedInitialData")
    resp = _invoke(client, "listAll")
    assert resp.status_code == 200
    items = json.loads(resp.json()["payload"])
    assert len(items) == 10
    assert items[0]["Key"] == "1"
    assert items[0]["Record"]["holder"] == "Marjan"


def test_error_statuses(client):
    resp = _invoke(client, "query", "missing")
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "RecordNotFound"

    resp = _invoke(client, "transferFlat", "1", "X")
    assert resp.status_code == 400
    assert resp.json()["error"] == "UnknownOperation"

    resp = _invoke(client, "create", "k", "c")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Incorrect number of arguments. Expecting 5"


def test_state_persists_between_requests(client):
    _invoke(client, "create", "k", "c", "r", "l", "h")
    _invoke(client, "updateHolder", "k", "new")
    resp = _invoke(client, "query", "k")
    assert json.loads(resp.json()["payload"]) == {
        "condition": "c",
        "ranking": "r",
        "location": "l",
        "holder": "new",
    }


def test_init_endpoint(client):
    resp = client.post("/api/v1/chaincode/init")
    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_rest_flat_routes(client):
    resp = client.put(
        "/api/v1/flats/a1",
        json={"condition": "c", "ranking": "5", "location": "0, 0", "holder": "Lee"},
    )
    assert resp.status_code == 200

    resp = client.get("/api/v1/flats/a1")
    assert resp.status_code == 200
    assert resp.json()["holder"] == "Lee"

    resp = client.patch("/api/v1/flats/a1/holder", json={"value": "Kim"})
    assert resp.status_code == 200
    assert resp.json() == {"condition": "c", "ranking": "5", "location": "0, 0", "holder": "Kim"}

    resp = client.patch("/api/v1/flats/a1/location", json={"value": "1, 1"})
    assert resp.status_code == 404

    resp = client.get("/api/v1/flats/zzz")
    assert resp.status_code == 404


def test_rest_list_and_seed(client):
    resp = client.post("/api/v1/flats/seed")
    assert resp.status_code == 204

    resp = client.get("/api/v1/flats/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["fetched_records_count"] == 10
    assert body["bookmark"] == ""
    assert {"Key", "Record"} == set(body["records"][0])

    resp = client.get("/api/v1/flats/", params={"limit": 2})
    body = resp.json()
    assert [r["Key"] for r in body["records"]] == ["1", "10"]
    assert body["bookmark"] == "2"

    resp = client.get("/api/v1/flats/", params={"limit": 2, "bookmark": body["bookmark"]})
    assert [r["Key"] for r in resp.json()["records"]] == ["2", "3"]


def test_update_missing_flat_over_rest(client):
    resp = client.patch("/api/v1/flats/none/ranking", json={"value": "1"})
    assert resp.status_code == 404


@pytest.fixture
def reject_fourth_write(monkeypatch):
    """Make the SQLite ledger refuse writes to key ``4``."""
    original = SqliteLedger.put_state

    def put_state(self, key, value):
        if key == "4":
            raise LedgerError("write to 4 rejected")
        original(self, key, value)

    monkeypatch.setattr(SqliteLedger, "put_state", put_state)


def test_failed_invoke_leaves_no_writes(client, reject_fourth_write):
    resp = _invoke(client, "seedInitialData")
    assert resp.status_code == 500
    assert resp.json()["error"] == "PersistenceError"
    assert resp.json()["message"] == "Failed to record flat: 4"

    # Keys 1-3 were written before the failure and must be rolled back.
    for key in ("1", "2", "3"):
        assert _invoke(client, "query", key).status_code == 404
    assert json.loads(_invoke(client, "listAll").json()["payload"]) == []


def test_failed_rest_seed_leaves_no_writes(client, reject_fourth_write):
    resp = client.post("/api/v1/flats/seed")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to record flat: 4"

    assert client.get("/api/v1/flats/1").status_code == 404
    assert client.get("/api/v1/flats/").json()["records"] == []
