"""Tests for the HTTP endpoints."""

import pytest
from sqlalchemy.exc import OperationalError

from identity_service.persistence.repositories.contact_repository import ContactRepository


@pytest.mark.asyncio
async def test_health_check(test_client):
    """Test the liveness endpoint."""
    response = await test_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_identify_new_contact(test_client):
    """Test identifying a never-seen pair."""
    response = await test_client.post(
        "/identify",
        json={"email": "lorraine@hillvalley.edu", "phoneNumber": "123456"},
    )

    assert response.status_code == 200
    contact = response.json()["contact"]
    assert contact["emails"] == ["lorraine@hillvalley.edu"]
    assert contact["phoneNumbers"] == ["123456"]
    assert contact["secondaryContactIds"] == []
    assert isinstance(contact["primaryContactId"], int)


@pytest.mark.asyncio
async def test_identify_links_new_email(test_client):
    """Test that a new email for a known phone is consolidated."""
    first = await test_client.post(
        "/identify", json={"email": "lorraine@hillvalley.edu", "phoneNumber": "123456"}
    )
    primary_id = first.json()["contact"]["primaryContactId"]

    response = await test_client.post(
        "/identify", json={"email": "mcfly@hillvalley.edu", "phoneNumber": "123456"}
    )

    contact = response.json()["contact"]
    assert contact["primaryContactId"] == primary_id
    assert contact["emails"] == ["lorraine@hillvalley.edu", "mcfly@hillvalley.edu"]
    assert contact["phoneNumbers"] == ["123456"]
    assert len(contact["secondaryContactIds"]) == 1


@pytest.mark.asyncio
async def test_identify_accepts_numeric_phone(test_client):
    """Test that a numeric phoneNumber is treated as a string."""
    await test_client.post("/identify", json={"email": "a@example.com", "phoneNumber": "123456"})

    response = await test_client.post("/identify", json={"phoneNumber": 123456})

    assert response.status_code == 200
    contact = response.json()["contact"]
    assert contact["emails"] == ["a@example.com"]
    assert contact["secondaryContactIds"] == []


@pytest.mark.asyncio
async def test_identify_merges_primaries(test_client):
    """Test that a bridging request merges two identities."""
    george = await test_client.post(
        "/identify", json={"email": "george@hillvalley.edu", "phoneNumber": "919191"}
    )
    biff = await test_client.post(
        "/identify", json={"email": "biffsucks@hillvalley.edu", "phoneNumber": "717171"}
    )
    george_id = george.json()["contact"]["primaryContactId"]
    biff_id = biff.json()["contact"]["primaryContactId"]

    response = await test_client.post(
        "/identify", json={"email": "george@hillvalley.edu", "phoneNumber": "717171"}
    )

    assert response.json() == {
        "contact": {
            "primaryContactId": george_id,
            "emails": ["george@hillvalley.edu", "biffsucks@hillvalley.edu"],
            "phoneNumbers": ["919191", "717171"],
            "secondaryContactIds": [biff_id],
        }
    }


@pytest.mark.asyncio
async def test_identify_requires_email_or_phone(test_client):
    """Test that a request with neither field is rejected."""
    response = await test_client.post("/identify", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Email or phoneNumber required"}


@pytest.mark.asyncio
async def test_identify_rejects_malformed_body(test_client):
    """Test that a body of the wrong shape is a 400."""
    response = await test_client.post("/identify", json={"email": ["not", "a", "string"]})

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_identify_store_failure_hides_details(test_client, monkeypatch):
    """Test that store errors become a generic 500."""

    async def unavailable(self, email=None, phone_number=None):
        raise OperationalError("SELECT", {}, Exception("password authentication failed"))

    monkeypatch.setattr(ContactRepository, "find_active_matches", unavailable)

    response = await test_client.post("/identify", json={"email": "a@example.com"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_list_contacts_returns_raw_rows(test_client):
    """Test that listing returns active rows with store column names."""
    await test_client.post("/identify", json={"email": "a@example.com", "phoneNumber": "111"})
    await test_client.post("/identify", json={"email": "a@example.com", "phoneNumber": "222"})

    response = await test_client.get("/contacts")

    assert response.status_code == 200
    rows = response.json()
    assert [r["phonenumber"] for r in rows] == ["111", "222"]
    assert rows[0]["linkprecedence"] == "primary"
    assert rows[0]["linkedid"] is None
    assert rows[1]["linkprecedence"] == "secondary"
    assert rows[1]["linkedid"] == rows[0]["id"]
    assert rows[0]["deletedat"] is None
    assert set(rows[0]) == {
        "id", "phonenumber", "email", "linkedid", "linkprecedence",
        "createdat", "updatedat", "deletedat",
    }


@pytest.mark.asyncio
async def test_delete_primary_contact(test_client):
    """Test deleting a primary removes its secondaries from listings."""
    first = await test_client.post("/identify", json={"email": "a@example.com", "phoneNumber": "111"})
    await test_client.post("/identify", json={"email": "a@example.com", "phoneNumber": "222"})
    primary_id = first.json()["contact"]["primaryContactId"]

    response = await test_client.delete(f"/contacts/{primary_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["deletedContactId"] == primary_id
    assert len(body["deletedContactIds"]) == 2
    assert (await test_client.get("/contacts")).json() == []


@pytest.mark.asyncio
async def test_delete_contact_not_found(test_client):
    """Test deleting an unknown contact."""
    response = await test_client.delete("/contacts/999")

    assert response.status_code == 404
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_delete_contact_invalid_id(test_client):
    """Test deleting with a non-numeric id."""
    response = await test_client.delete("/contacts/abc")

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_delete_all_requires_confirm_true(test_client):
    """Test the bulk delete gate."""
    await test_client.post("/identify", json={"email": "a@example.com"})

    for url in ("/contacts", "/contacts?confirm=yes", "/contacts?confirm=TRUE"):
        response = await test_client.delete(url)
        assert response.status_code == 400
        assert "error" in response.json()

    assert len((await test_client.get("/contacts")).json()) == 1


@pytest.mark.asyncio
async def test_delete_all_contacts(test_client):
    """Test bulk deletion reports the active count."""
    await test_client.post("/identify", json={"email": "a@example.com", "phoneNumber": "111"})
    await test_client.post("/identify", json={"email": "a@example.com", "phoneNumber": "222"})
    await test_client.post("/identify", json={"email": "z@example.com"})

    response = await test_client.delete("/contacts?confirm=true")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["deletedCount"] == 3
    assert (await test_client.get("/contacts")).json() == []


@pytest.mark.asyncio
async def test_testdb_probe(test_client):
    """Test the store connectivity probe."""
    response = await test_client.get("/testdb")

    assert response.status_code == 200
    body = response.json()
    assert body["version"].startswith("SQLite")
    assert body["now"]


@pytest.mark.asyncio
async def test_request_id_echoed(test_client):
    """Test that the request id header is returned."""
    response = await test_client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"

    generated = await test_client.get("/health")
    assert generated.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_identify_rejects_overlong_values(test_client):
    """Test that values longer than their columns are a 400, not a store error."""
    too_long_phone = await test_client.post("/identify", json={"phoneNumber": "1" * 21})
    numeric_too_long = await test_client.post("/identify", json={"phoneNumber": 10**21})
    too_long_email = await test_client.post(
        "/identify", json={"email": "a" * 250 + "@example.com"}
    )

    for response in (too_long_phone, numeric_too_long, too_long_email):
        assert response.status_code == 400
        assert "error" in response.json()

    assert (await test_client.get("/contacts")).json() == []


@pytest.mark.asyncio
async def test_identify_accepts_values_at_column_length(test_client):
    """Test that values exactly as long as their columns are stored."""
    response = await test_client.post("/identify", json={"phoneNumber": " " + "1" * 20 + " "})

    assert response.status_code == 200
    assert response.json()["contact"]["phoneNumbers"] == ["1" * 20]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"phoneNumber": True}, {"phoneNumber": 1.5}, {"email": 42}])
async def test_identify_rejects_wrongly_typed_values(test_client, body):
    """Test that booleans, floats and numeric emails are not coerced."""
    response = await test_client.post("/identify", json=body)

    assert response.status_code == 400
    assert "error" in response.json()
    assert (await test_client.get("/contacts")).json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("contact_id", ["0", "-1"])
async def test_delete_contact_non_positive_id_not_found(test_client, contact_id):
    """Test that well-formed ids matching no record are a 404."""
    response = await test_client.delete(f"/contacts/{contact_id}")

    assert response.status_code == 404
    assert response.json() == {"error": f"Contact {contact_id} not found"}


@pytest.mark.asyncio
async def test_error_responses_documented(test_client):
    """Test that the error body shape is published in the OpenAPI schema."""
    schema = (await test_client.get("/openapi.json")).json()

    assert "ErrorResponse" in schema["components"]["schemas"]
    identify_responses = schema["paths"]["/identify"]["post"]["responses"]
    assert identify_responses["400"]["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
    assert "404" in schema["paths"]["/contacts/{contact_id}"]["delete"]["responses"]
