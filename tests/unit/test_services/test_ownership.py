"""Unit tests for ownership checks."""
import pytest

from polly.core.errors import AuthorizationError, NotFoundError
from polly.services.ownership import assert_owner, clean_poll_id, fetch_owned_poll


@pytest.mark.unit
class TestAssertOwner:

    def test_owner_passes(self, alice):
        assert_owner(alice.id, alice)

    def test_other_user_fails(self, alice, bob):
        with pytest.raises(AuthorizationError, match="nope"):
            assert_owner(alice.id, bob, message="nope")

    def test_admin_needs_permission(self, alice, admin):
        with pytest.raises(AuthorizationError):
            assert_owner(alice.id, admin)
        assert_owner(alice.id, admin, allow_admin=True)


@pytest.mark.unit
class TestFetchOwnedPoll:

    def test_returns_row_for_owner(self, store, alice, make_poll):
        poll = make_poll(alice)
        assert fetch_owned_poll(store, poll["id"], alice)["id"] == poll["id"]

    def test_message_names_action(self, store, alice, bob, make_poll):
        poll = make_poll(alice)
        with pytest.raises(AuthorizationError, match="You can only delete your own polls"):
            fetch_owned_poll(store, poll["id"], bob, action="delete")

    def test_missing(self, store, alice):
        with pytest.raises(NotFoundError, match="Poll not found"):
            fetch_owned_poll(store, "nope", alice)


@pytest.mark.unit
def test_clean_poll_id_hides_malformed_ids():
    with pytest.raises(NotFoundError, match="Poll not found"):
        clean_poll_id("not/an/id")
    assert clean_poll_id(" abc ") == "abc"
