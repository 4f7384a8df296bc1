"""Contract tests for the user CRUD, paging and search endpoints."""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

SEEDED_USERS = 20

NEW_USER = {
    "firstName": "Ivan",
    "lastName": "Petrov",
    "email": "ivan.petrov@example.com",
    "dayOfBirth": "1990-05-17",
}


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_uses_default_page(client: TestClient) -> None:
    response = client.get("/api/users")

    assert response.status_code == 200
    payload = response.json()
    assert len(payload["_embedded"]["users"]) == SEEDED_USERS
    assert payload["page"] == {"size": 20, "totalElements": SEEDED_USERS, "totalPages": 1, "number": 0}
    assert set(payload["_embedded"]["users"][0]) == {"id", "firstName", "lastName", "email", "dayOfBirth"}
    assert "self" in payload["_links"]


@pytest.mark.parametrize(
    ("size", "expected_pages"),
    [
        ("1", 20),
        ("2", 10),
        ("3", 7),
        ("20", 1),
        ("100", 1),
        ("-1", 1),
        ("asd", 1),
        ("10000000000000000", 1),
    ],
)
def test_total_pages_follow_page_size(client: TestClient, size: str, expected_pages: int) -> None:
    response = client.get("/api/users", params={"size": size})

    assert response.status_code == 200
    assert response.json()["page"]["totalPages"] == expected_pages


@pytest.mark.parametrize(
    ("page", "expected_number", "expected_count"),
    [
        ("3", 3, 2),
        ("9", 9, 2),
        ("10", 10, 0),
        ("1000", 1000, 0),
        ("100000000000", 0, 2),
        ("-1", 0, 2),
        ("asd", 0, 2),
    ],
)
def test_page_numbers_are_lenient(
    client: TestClient, page: str, expected_number: int, expected_count: int
) -> None:
    response = client.get("/api/users", params={"page": page, "size": "2"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["page"]["number"] == expected_number
    assert len(payload["_embedded"]["users"]) == expected_count


def test_page_links_navigate_between_pages(client: TestClient) -> None:
    links = client.get("/api/users", params={"page": "1", "size": "5"}).json()["_links"]

    assert set(links) == {"self", "first", "last", "prev", "next"}
    assert "page=3" in links["last"]["href"]


@pytest.mark.parametrize("field", ["id", "firstName", "lastName", "email", "dayOfBirth"])
@pytest.mark.parametrize("direction", ["asc", "desc"])
def test_sorting_by_each_field(client: TestClient, field: str, direction: str) -> None:
    response = client.get("/api/users", params={"sort": f"{field},{direction}"})

    assert response.status_code == 200
    values = [user[field] for user in response.json()["_embedded"]["users"]]
    assert values == sorted(values, reverse=direction == "desc")


def test_unknown_sort_property_is_ignored(client: TestClient) -> None:
    response = client.get("/api/users", params={"sort": "nickname,desc"})

    assert response.status_code == 200
    ids = [user["id"] for user in response.json()["_embedded"]["users"]]
    assert ids == sorted(ids)


def test_create_and_fetch_user(client: TestClient) -> None:
    created = client.post("/api/users", json=NEW_USER)

    assert created.status_code == 201
    body = created.json()
    assert body["id"] > SEEDED_USERS
    assert {key: body[key] for key in NEW_USER} == NEW_USER

    fetched = client.get(f"/api/users/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body


def test_replace_user(client: TestClient) -> None:
    response = client.put("/api/users/1", json=NEW_USER)

    assert response.status_code == 200
    assert response.json() == {"id": 1, **NEW_USER}


def test_replace_missing_user_returns_404(client: TestClient) -> None:
    response = client.put("/api/users/999", json=NEW_USER)

    assert response.status_code == 404
    assert response.json()["message"] == "Unable to find User with id 999"


def test_patch_updates_only_given_fields(client: TestClient) -> None:
    before = client.get("/api/users/2").json()

    response = client.patch("/api/users/2", json={"email": "patched@example.com"})

    assert response.status_code == 200
    assert response.json() == {**before, "email": "patched@example.com"}


def test_patch_with_invalid_merge_is_a_constraint_violation(client: TestClient) -> None:
    response = client.patch("/api/users/2", json={"email": "bad"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "Validation error"
    assert payload["subErrors"] == [
        {
            "object": "User",
            "field": "email",
            "rejectedValue": "bad",
            "message": "must be a well-formed email address",
        }
    ]
    assert client.get("/api/users/2").json()["email"] == "workingemail-2@gmail.com"


def test_patch_with_equal_names_is_rejected_by_repository(client: TestClient) -> None:
    response = client.patch("/api/users/3", json={"firstName": "Same", "lastName": "same"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "Validation failed"
    assert payload["subErrors"] == [{"object": "User", "message": "first name and last name must differ"}]


def test_delete_user(client: TestClient) -> None:
    response = client.delete("/api/users/4")

    assert response.status_code == 204
    assert client.get("/api/users/4").status_code == 404
    assert client.get("/api/users").json()["page"]["totalElements"] == SEEDED_USERS - 1


def test_delete_missing_user_returns_404(client: TestClient) -> None:
    response = client.delete("/api/users/999")

    assert response.status_code == 404


def test_search_index_lists_queries(client: TestClient) -> None:
    response = client.get("/api/users/search")

    assert response.status_code == 200
    links = response.json()["_links"]
    assert set(links) == {"findByEmail", "findByLastName", "findByDayOfBirthBefore", "self"}
    assert links["findByEmail"]["templated"] is True


def test_find_by_email(client: TestClient) -> None:
    response = client.get("/api/users/search/findByEmail", params={"email": "workingemail-3@gmail.com"})

    assert response.status_code == 200
    assert response.json()["id"] == 3


def test_find_by_unknown_email_returns_404(client: TestClient) -> None:
    response = client.get("/api/users/search/findByEmail", params={"email": "nobody@example.com"})

    assert response.status_code == 404
    assert response.json()["message"] == "Unable to find User with email nobody@example.com"


def test_find_by_last_name(client: TestClient) -> None:
    last_name = client.get("/api/users/1").json()["lastName"]

    response = client.get("/api/users/search/findByLastName", params={"lastName": last_name})

    assert response.status_code == 200
    users = response.json()["_embedded"]["users"]
    assert users
    assert all(user["lastName"] == last_name for user in users)


def test_find_by_day_of_birth_before(client: TestClient) -> None:
    cutoff = date(date.today().year - 50, 1, 1).isoformat()

    response = client.get("/api/users/search/findByDayOfBirthBefore", params={"date": cutoff})

    assert response.status_code == 200
    payload = response.json()
    assert all(user["dayOfBirth"] < cutoff for user in payload["_embedded"]["users"])
    assert payload["page"]["totalElements"] <= SEEDED_USERS
