"""Helpers for driving the API from tests."""
from typing import Iterable, Optional

API = "/api/v1"
DEFAULT_PASSWORD = "correct-horse-battery"


def register(client, email: str, password: str = DEFAULT_PASSWORD, name: Optional[str] = None):
    """Create an account through the API; the client ends up signed in."""
    response = client.post(
        f"{API}/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 200
    assert response.json()["error"] is None
    return client


def login(client, email: str, password: str = DEFAULT_PASSWORD):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


def fetch_csrf_token(client) -> str:
    response = client.get(f"{API}/csrf-token")
    assert response.status_code == 200
    return response.json()["csrf_token"]


def current_user(client) -> Optional[dict]:
    return client.get(f"{API}/auth/me").json()["user"]


def create_poll(
    client,
    question: str = "Favourite colour?",
    options: Iterable[str] = ("Red", "Green", "Blue"),
) -> str:
    """Create a poll as the client's user and return its id."""
    response = client.post(
        f"{API}/polls",
        data={"question": question, "options": list(options), "csrf_token": fetch_csrf_token(client)},
    )
    assert response.status_code == 200
    assert response.json()["error"] is None

    polls = client.get(f"{API}/polls").json()["polls"]
    return polls[0]["id"]


def vote(client, poll_id: str, option_index, csrf_token: Optional[str] = None):
    if csrf_token is None:
        csrf_token = fetch_csrf_token(client)
    return client.post(
        f"{API}/polls/{poll_id}/votes",
        data={"option_index": str(option_index), "csrf_token": csrf_token},
    )
