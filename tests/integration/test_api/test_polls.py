"""Integration tests for poll endpoints."""
import pytest

from tests.utils import API, create_poll, fetch_csrf_token


def post_poll(client, question, options, csrf_token):
    return client.post(
        f"{API}/polls",
        data={"question": question, "options": options, "csrf_token": csrf_token},
    )


@pytest.mark.integration
class TestCreatePoll:

    def test_create_and_list(self, alice):
        poll_id = create_poll(alice, "Lunch?", ["Pizza", "Salad"])

        polls = alice.get(f"{API}/polls").json()["polls"]
        assert [poll["id"] for poll in polls] == [poll_id]
        assert polls[0]["question"] == "Lunch?"
        assert polls[0]["options"] == ["Pizza", "Salad"]

    def test_list_carries_token(self, alice):
        body = alice.get(f"{API}/polls").json()
        assert len(body["csrf_token"]) == 64

    def test_question_too_long(self, alice):
        response = post_poll(alice, "A" * 501, ["a", "b"], fetch_csrf_token(alice))

        assert response.status_code == 200
        assert response.json() == {"error": "Question is too long. Maximum 500 characters allowed."}
        assert alice.get(f"{API}/polls").json()["polls"] == []

    def test_single_option(self, alice):
        response = post_poll(alice, "Lunch?", ["only one"], fetch_csrf_token(alice))
        assert response.json() == {"error": "Please provide a question and at least two options."}

    def test_script_rejected(self, alice):
        response = post_poll(alice, "Lunch?", ["a", "<script>alert(1)</script>"], fetch_csrf_token(alice))
        assert response.json() == {"error": "Invalid characters detected in options."}

    def test_missing_token(self, alice):
        response = alice.post(f"{API}/polls", data={"question": "Lunch?", "options": ["a", "b"]})
        assert response.json() == {"error": "Missing security token"}
        assert alice.get(f"{API}/polls").json()["polls"] == []

    def test_token_from_another_session_rejected(self, alice, bob):
        """A token lifted from one browser is useless in another."""
        bobs_token = fetch_csrf_token(bob)
        fetch_csrf_token(alice)

        response = post_poll(alice, "Lunch?", ["a", "b"], bobs_token)

        assert response.json() == {"error": "Invalid security token. Please refresh the page and try again."}

    def test_token_is_single_use(self, alice):
        token = fetch_csrf_token(alice)
        assert post_poll(alice, "Lunch?", ["a", "b"], token).json() == {"error": None}

        replay = post_poll(alice, "Dinner?", ["a", "b"], token)

        assert replay.json() == {"error": "Invalid security token. Please refresh the page and try again."}
        assert len(alice.get(f"{API}/polls").json()["polls"]) == 1

    def test_token_cookie_attributes(self, alice):
        response = alice.get(f"{API}/csrf-token")
        cookie = response.headers["set-cookie"]
        assert "csrf_token=" in cookie
        assert "HttpOnly" in cookie
        assert "SameSite=strict" in cookie
        assert "Path=/" in cookie
        assert "Max-Age=3600" in cookie

    def test_forged_user_id_is_ignored(self, alice, bob):
        """The owner always comes from the session."""
        bob_id = bob.get(f"{API}/auth/me").json()["user"]["id"]

        response = alice.post(
            f"{API}/polls",
            data={
                "question": "Whose poll?",
                "options": ["a", "b"],
                "csrf_token": fetch_csrf_token(alice),
                "user_id": bob_id,
            },
        )

        assert response.json() == {"error": None}
        assert bob.get(f"{API}/polls").json()["polls"] == []
        [poll] = alice.get(f"{API}/polls").json()["polls"]
        assert poll["user_id"] != bob_id


@pytest.mark.integration
class TestReadPoll:

    def test_any_user_can_read(self, alice, bob):
        poll_id = create_poll(alice)

        body = bob.get(f"{API}/polls/{poll_id}").json()

        assert body["poll"]["id"] == poll_id
        assert body["has_voted"] is False
        assert len(body["csrf_token"]) == 64

    def test_missing_poll(self, alice):
        response = alice.get(f"{API}/polls/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "Poll not found"


@pytest.mark.integration
class TestEditPoll:

    def test_owner_gets_edit_page(self, alice):
        poll_id = create_poll(alice)
        body = alice.get(f"{API}/polls/{poll_id}/edit").json()
        assert body["poll"]["id"] == poll_id
        assert len(body["csrf_token"]) == 64

    def test_non_owner_redirected_to_poll_page(self, alice, bob):
        poll_id = create_poll(alice)

        response = bob.get(f"{API}/polls/{poll_id}/edit", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == f"/polls/{poll_id}"

    def test_edit_page_missing_poll(self, alice):
        assert alice.get(f"{API}/polls/nope/edit").status_code == 404

    def test_owner_updates(self, alice):
        poll_id = create_poll(alice)
        token = alice.get(f"{API}/polls/{poll_id}/edit").json()["csrf_token"]

        response = alice.post(
            f"{API}/polls/{poll_id}",
            data={"question": "Dinner?", "options": ["Soup", "Steak"], "csrf_token": token},
        )

        assert response.json() == {"error": None}
        poll = alice.get(f"{API}/polls/{poll_id}").json()["poll"]
        assert poll["question"] == "Dinner?"
        assert poll["options"] == ["Soup", "Steak"]

    def test_non_owner_update_rejected_even_with_forged_user_id(self, alice, bob):
        poll_id = create_poll(alice)
        alice_id = alice.get(f"{API}/auth/me").json()["user"]["id"]

        response = bob.post(
            f"{API}/polls/{poll_id}",
            data={
                "question": "Hijacked?",
                "options": ["x", "y"],
                "csrf_token": fetch_csrf_token(bob),
                "user_id": alice_id,
            },
        )

        assert response.json() == {"error": "You can only update your own polls"}
        assert alice.get(f"{API}/polls/{poll_id}").json()["poll"]["question"] == "Favourite colour?"


@pytest.mark.integration
class TestDeletePoll:

    def test_owner_deletes(self, alice):
        poll_id = create_poll(alice)

        response = alice.post(
            f"{API}/polls/delete",
            data={"poll_id": poll_id, "csrf_token": fetch_csrf_token(alice)},
        )

        assert response.json() == {"error": None}
        assert alice.get(f"{API}/polls").json()["polls"] == []
        assert alice.get(f"{API}/polls/{poll_id}").status_code == 404

    def test_non_owner_rejected(self, alice, bob):
        poll_id = create_poll(alice)

        response = bob.post(
            f"{API}/polls/delete",
            data={"poll_id": poll_id, "csrf_token": fetch_csrf_token(bob)},
        )

        assert response.json() == {"error": "You can only delete your own polls"}
        assert alice.get(f"{API}/polls/{poll_id}").status_code == 200

    def test_bad_token_leaves_poll(self, alice):
        poll_id = create_poll(alice)
        fetch_csrf_token(alice)

        response = alice.post(f"{API}/polls/delete", data={"poll_id": poll_id, "csrf_token": "0" * 64})

        assert response.json()["error"] == "Invalid security token. Please refresh the page and try again."
        assert alice.get(f"{API}/polls/{poll_id}").status_code == 200
