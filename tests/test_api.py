from codec import encode_state
from identifiers import generate_ulid


def create(api, state):
    response = api.post("/api/lists", json={"data": state.to_json_dict()})
    assert response.status_code == 201
    return response.json()


def test_create_list(api, dinner):
    response = api.post("/api/lists", json={"data": dinner.to_json_dict()})

    assert response.status_code == 201
    assert response.headers["cache-control"] == "no-store"
    body = response.json()
    assert len(body["id"]) == 26
    assert body["version"] == 1
    assert body["createdAt"] == body["updatedAt"]
    assert body["data"] == dinner.to_json_dict()


def test_create_rejects_missing_people(api):
    response = api.post("/api/lists", json={"data": {"currency": "€"}})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request body"


def test_create_rejects_missing_data(api):
    assert api.post("/api/lists", json={}).status_code == 400


def test_create_rejects_negative_amount(api):
    data = {"people": [{"id": "p1", "name": "Bob", "items": [{"id": "i1", "name": "x", "amountCents": -1}]}]}
    assert api.post("/api/lists", json={"data": data}).status_code == 400


def test_create_rejects_malformed_json(api):
    response = api.post("/api/lists", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_get_list(api, dinner):
    created = create(api, dinner)

    response = api.get(f"/api/lists/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_list_is_case_insensitive(api, dinner):
    created = create(api, dinner)
    response = api.get(f"/api/lists/{created['id'].lower()}")
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]


def test_get_missing_list(api):
    response = api.get(f"/api/lists/{generate_ulid()}")
    assert response.status_code == 404
    assert response.json()["detail"] == "List not found"


def test_get_invalid_id(api):
    response = api.get("/api/lists/not-a-valid-id")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid list ID format"


def test_update_list(api, dinner):
    created = create(api, dinner)
    dinner.event_name = "Moved to Saturday"

    response = api.put(f"/api/lists/{created['id']}", json={"data": dinner.to_json_dict(), "version": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["version"] == 2
    assert body["createdAt"] == created["createdAt"]
    assert body["data"]["eventName"] == "Moved to Saturday"


def test_update_conflict(api, dinner):
    created = create(api, dinner)
    url = f"/api/lists/{created['id']}"
    first = api.put(url, json={"data": dinner.to_json_dict(), "version": 1})
    second = api.put(url, json={"data": dinner.to_json_dict(), "version": 1})

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json() == {
        "detail": "Version conflict",
        "code": "VERSION_CONFLICT",
        "expectedVersion": 1,
        "actualVersion": 2,
    }


def test_update_missing_list(api, dinner):
    response = api.put(f"/api/lists/{generate_ulid()}", json={"data": dinner.to_json_dict(), "version": 1})
    assert response.status_code == 404


def test_update_requires_version(api, dinner):
    created = create(api, dinner)
    url = f"/api/lists/{created['id']}"
    assert api.put(url, json={"data": dinner.to_json_dict()}).status_code == 400
    assert api.put(url, json={"data": dinner.to_json_dict(), "version": 0}).status_code == 400


def test_compute_settlements(api, dinner):
    response = api.post("/api/settlements", json=dinner.to_json_dict())

    assert response.status_code == 200
    body = response.json()
    assert body["totalCents"] == 6500
    assert body["fairShareCents"] == 2166
    assert body["settlements"] == [
        {"from": "Carol", "to": "Alice", "amountCents": 2166},
        {"from": "Bob", "to": "Alice", "amountCents": 666},
    ]


def test_share_link(api, dinner):
    response = api.post(
        "/api/share", json={"state": dinner.to_json_dict(), "origin": "https://split.example", "path": "/"}
    )

    body = response.json()
    assert body["encoded"] == encode_state(dinner)
    assert body["url"] == f"https://split.example?data={body['encoded']}"
    assert body["exceedsBudget"] is False


def test_resolve_url_state(api, dinner):
    response = api.get("/api/state", params={"data": encode_state(dinner)})

    body = response.json()
    assert body["mode"] == "url"
    assert body["state"] == dinner.to_json_dict()
    assert "listId" not in body


def test_resolve_garbage_falls_back_to_default(api):
    body = api.get("/api/state", params={"data": "%%%garbage"}).json()
    assert body["mode"] == "url"
    assert len(body["state"]["people"]) == 1
    assert body["state"]["people"][0]["name"] == ""


def test_resolve_list_ignores_encoded_state(api, dinner):
    created = create(api, dinner)
    other = dinner.model_copy(update={"event_name": "Something else"})

    body = api.get("/api/state", params={"list": created["id"], "data": encode_state(other)}).json()

    assert body["mode"] == "persisted"
    assert body["listId"] == created["id"]
    assert body["version"] == 1
    assert body["state"]["eventName"] == "Friday dinner"


def test_resolve_missing_list(api):
    assert api.get("/api/state", params={"list": generate_ulid()}).status_code == 404


def test_cors_preflight(api):
    response = api.options(
        "/api/lists",
        headers={"Origin": "https://split.example", "Access-Control-Request-Method": "PUT"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://split.example")
