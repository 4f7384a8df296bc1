"""Contract tests for error documents returned by the user API."""

from __future__ import annotations

import re

import pytest
from fastapi.testclient import TestClient

TIMESTAMP_PATTERN = re.compile(r"^\d{2}-\d{2}-\d{4} \d{2}:\d{2}:\d{2}$")

VALID_USER = {
    "firstName": "Ivan",
    "lastName": "Petrov",
    "email": "ivan.petrov@example.com",
    "dayOfBirth": "1990-05-17",
}


def test_invalid_body_reports_every_field(client: TestClient) -> None:
    response = client.post(
        "/api/users",
        json={"firstName": "J", "lastName": "Doe", "dayOfBirth": "2000-01-01"},
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["status"] == 400
    assert payload["message"] == "Validation error"
    assert TIMESTAMP_PATTERN.match(payload["timestamp"])
    assert "debugMessage" not in payload
    assert payload["subErrors"] == [
        {"object": "User", "field": "firstName", "rejectedValue": "J", "message": "size must be between 2 and 30"},
        {"object": "User", "field": "email", "rejectedValue": None, "message": "must not be blank"},
    ]


def test_duplicate_email_is_a_conflict(client: TestClient) -> None:
    response = client.post("/api/users", json={**VALID_USER, "email": "workingemail-1@gmail.com"})

    assert response.status_code == 409
    payload = response.json()
    assert payload["message"] == "Database error"
    assert "UNIQUE" in payload["debugMessage"]
    assert client.get("/api/users").json()["page"]["totalElements"] == 20


def test_missing_user_is_not_found(client: TestClient) -> None:
    response = client.get("/api/users/999")

    assert response.status_code == 404
    payload = response.json()
    assert payload["message"] == "Unable to find User with id 999"
    assert "subErrors" not in payload


def test_non_numeric_id_is_a_number_format_error(client: TestClient) -> None:
    response = client.get("/api/users/abc")

    assert response.status_code == 400
    assert response.json()["message"] == "invalid literal for int() with base 10: 'abc'"


@pytest.mark.parametrize(
    ("raw_id", "message"),
    [
        ("1_0", "invalid literal for int() with base 10: '1_0'"),
        ("99999999999999999999999", "value '99999999999999999999999' is out of range for a 64-bit integer"),
    ],
)
def test_malformed_or_oversized_id_is_a_number_format_error(client: TestClient, raw_id: str, message: str) -> None:
    for method in ("get", "delete"):
        response = getattr(client, method)(f"/api/users/{raw_id}")

        assert response.status_code == 400
        assert response.json()["message"] == message


def test_signed_id_within_range_is_looked_up(client: TestClient) -> None:
    assert client.get("/api/users/+3").json()["id"] == 3
    assert client.get("/api/users/9223372036854775807").status_code == 404


def test_non_json_body_is_unsupported(client: TestClient) -> None:
    response = client.post("/api/users", content="Ivan Petrov", headers={"Content-Type": "text/plain"})

    assert response.status_code == 415
    message = response.json()["message"]
    assert message.startswith("text/plain media type is not supported")
    assert "application/json" in message


def test_json_suffix_media_type_is_accepted(client: TestClient) -> None:
    response = client.post(
        "/api/users",
        content='{"firstName": "Ivan", "lastName": "Petrov", "email": "ivan@example.com", "dayOfBirth": "1990-05-17"}',
        headers={"Content-Type": "application/hal+json"},
    )

    assert response.status_code == 201


def test_malformed_json_is_unreadable(client: TestClient) -> None:
    response = client.post(
        "/api/users",
        content='{"firstName": "Ivan",',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == (
        "Wrong content-type of the request format. Expected content-type is application/json."
    )
    assert payload["debugMessage"]


def test_unparseable_date_in_body_is_unreadable(client: TestClient) -> None:
    response = client.post("/api/users", json={**VALID_USER, "dayOfBirth": "yesterday"})

    assert response.status_code == 400
    assert response.json()["message"].startswith("Wrong content-type of the request format")


def test_birth_date_too_far_back_is_rejected_by_repository(client: TestClient) -> None:
    response = client.post("/api/users", json={**VALID_USER, "dayOfBirth": "1850-01-01"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "Validation failed"
    assert payload["subErrors"] == [
        {
            "object": "User",
            "field": "dayOfBirth",
            "rejectedValue": "1850-01-01",
            "message": "must be within the last 150 years",
        }
    ]


def test_missing_search_parameter(client: TestClient) -> None:
    response = client.get("/api/users/search/findByEmail")

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "Parameter is missing: email"
    assert payload["debugMessage"] == "Required query parameter 'email' is not present"


def test_unconvertible_search_parameter(client: TestClient) -> None:
    response = client.get("/api/users/search/findByDayOfBirthBefore", params={"date": "abc"})

    assert response.status_code == 400
    assert response.json()["message"] == (
        "The parameter 'date' of value 'abc' could not be converted to type 'date'"
    )


def test_search_parameter_constraint_violation(client: TestClient) -> None:
    response = client.get("/api/users/search/findByLastName", params={"lastName": "L"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "Validation error"
    [issue] = payload["subErrors"]
    assert issue["object"] == "findByLastName"
    assert issue["field"] == "lastName"
    assert issue["rejectedValue"] == "L"


def test_unsupported_method(client: TestClient) -> None:
    response = client.delete("/api/users")

    assert response.status_code == 400
    assert response.json()["message"] == "Unsupported method DELETE with URL http://testserver/api/users"


def test_unknown_route(client: TestClient) -> None:
    response = client.get("/api/accounts")

    assert response.status_code == 400
    assert response.json()["message"] == "Unsupported method GET with URL http://testserver/api/accounts"
