"""Craftsman endpoints: listing by join date, specialty filter and CRUD."""

import logging
from unittest.mock import patch

from storefront.storage.sql_collection import SqlCollection

CRAFTSMEN_URL = "/api/craftsmen"


async def test_list_by_join_date_descending(client, make_craftsman):
    veteran = await make_craftsman(minutes=0, name="Veteran")
    rookie = await make_craftsman(minutes=60, name="Rookie")
    body = (await client.get(CRAFTSMEN_URL)).json()
    assert [c["id"] for c in body["craftsmen"]] == [rookie.id, veteran.id]
    assert body["pagination"]["limit"] == 50


async def test_list_filter_specialty(client, make_craftsman):
    await make_craftsman(specialty="Elektrik")
    await make_craftsman(specialty="Santexnik")
    body = (await client.get(CRAFTSMEN_URL, params={"specialty": "Santexnik"})).json()
    assert [c["specialty"] for c in body["craftsmen"]] == ["Santexnik"]


async def test_list_filter_status_and_search(client, make_craftsman):
    await make_craftsman(name="Bobur Usta", status="busy")
    await make_craftsman(name="Bobur Kichik", status="active")
    await make_craftsman(name="Jasur", status="busy")
    body = (await client.get(CRAFTSMEN_URL, params={"status": "busy", "search": "bobur"})).json()
    assert [c["name"] for c in body["craftsmen"]] == ["Bobur Usta"]


async def test_limit_clamped(client):
    body = (await client.get(CRAFTSMEN_URL, params={"limit": "100000"})).json()
    assert body["pagination"]["limit"] == 1000


async def test_storage_failure_returns_503(client):
    with patch.object(SqlCollection, "find_matching", side_effect=OSError("disk")):
        resp = await client.get(CRAFTSMEN_URL)
    assert resp.status_code == 503
    assert resp.json() == {"detail": "Failed to fetch craftsmen"}


async def test_create_defaults_join_date(client):
    resp = await client.post(
        CRAFTSMEN_URL,
        json={"name": "Dilshod", "specialty": "Kafelchi", "phone": "+998977770000", "portfolio": ["/u/1.webp"]},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["joinDate"]
    assert body["status"] == "active"
    assert body["portfolio"] == ["/u/1.webp"]
    assert body["completedJobs"] == 0


async def test_create_rejects_bad_rating(client):
    resp = await client.post(
        CRAFTSMEN_URL,
        json={"name": "X", "specialty": "Y", "phone": "1", "rating": 9},
    )
    assert resp.status_code == 422


async def test_get_update_delete(client, make_craftsman):
    craftsman = await make_craftsman(name="Aziz")

    resp = await client.get(f"{CRAFTSMEN_URL}/{craftsman.id}")
    assert resp.json()["name"] == "Aziz"

    resp = await client.put(
        f"{CRAFTSMEN_URL}/{craftsman.id}",
        json={"status": "busy", "completedJobs": 12, "name": None},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "busy"
    assert resp.json()["completedJobs"] == 12
    assert resp.json()["name"] == "Aziz"

    resp = await client.delete(f"{CRAFTSMEN_URL}/{craftsman.id}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Craftsman deleted"}

    assert (await client.get(f"{CRAFTSMEN_URL}/{craftsman.id}")).status_code == 404


async def test_missing_craftsman(client):
    resp = await client.get(f"{CRAFTSMEN_URL}/missing")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Craftsman missing not found"


async def test_changes_are_logged(client, make_craftsman, caplog):
    craftsman = await make_craftsman()
    with caplog.at_level(logging.INFO, logger="storefront.services.craftsman_service"):
        created = (await client.post(
            CRAFTSMEN_URL, json={"name": "Sardor", "specialty": "Payvandchi", "phone": "+998971112233"},
        )).json()
        await client.put(f"{CRAFTSMEN_URL}/{craftsman.id}", json={"status": "inactive"})
        await client.delete(f"{CRAFTSMEN_URL}/{craftsman.id}")

    assert f"Craftsman created: {created['id']}" in caplog.text
    assert f"Craftsman {craftsman.id} updated: ['status']" in caplog.text
    assert f"Craftsman {craftsman.id} deleted" in caplog.text
