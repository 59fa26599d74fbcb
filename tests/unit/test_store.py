"""Unit tests for the SQLAlchemy row store."""
import pytest

from polly.core.errors import ConflictError, NotFoundError, StoreError


@pytest.fixture
def user_row(sql_store):
    return sql_store.insert("users", [{
        "email": "alice@example.com",
        "password_hash": "x",
        "user_metadata": {},
        "app_metadata": {},
    }])[0]


@pytest.fixture
def poll_rows(sql_store, user_row):
    return [
        sql_store.insert("polls", [{
            "user_id": user_row["id"],
            "question": f"Question {n}",
            "options": ["a", "b"],
        }])[0]
        for n in range(3)
    ]


@pytest.mark.unit
class TestSqlRowStore:

    def test_insert_fills_generated_columns(self, user_row):
        assert user_row["id"]
        assert user_row["created_at"] is not None
        assert user_row["email"] == "alice@example.com"

    def test_select_with_filters(self, sql_store, user_row, poll_rows):
        rows = sql_store.select("polls", {"id": poll_rows[1]["id"]})
        assert [row["question"] for row in rows] == ["Question 1"]

    def test_select_columns_order_and_limit(self, sql_store, poll_rows):
        rows = sql_store.select(
            "polls",
            columns=["question"],
            order_by="question",
            descending=True,
            limit=2,
        )
        assert rows == [{"question": "Question 2"}, {"question": "Question 1"}]

    def test_json_columns_round_trip(self, sql_store, poll_rows):
        row = sql_store.single("polls", {"id": poll_rows[0]["id"]})
        assert row["options"] == ["a", "b"]

    def test_duplicate_vote_is_conflict(self, sql_store, user_row, poll_rows):
        vote = {"poll_id": poll_rows[0]["id"], "user_id": user_row["id"], "selected_option": 0}
        sql_store.insert("votes", [vote])

        with pytest.raises(ConflictError):
            sql_store.insert("votes", [dict(vote, selected_option=1)])

        # Session is usable again after the rollback
        assert len(sql_store.select("votes", {"poll_id": poll_rows[0]["id"]})) == 1

    def test_duplicate_email_is_conflict(self, sql_store, user_row):
        with pytest.raises(ConflictError):
            sql_store.insert("users", [{"email": "alice@example.com", "password_hash": "y"}])

    def test_update_returns_count(self, sql_store, user_row, poll_rows):
        count = sql_store.update(
            "polls",
            {"question": "Changed"},
            {"id": poll_rows[0]["id"], "user_id": user_row["id"]},
        )
        assert count == 1

    def test_poll_delete_cascades_to_votes(self, sql_store, user_row, poll_rows):
        sql_store.insert("votes", [{"poll_id": poll_rows[0]["id"], "user_id": user_row["id"], "selected_option": 0}])

        assert sql_store.delete("polls", {"id": poll_rows[0]["id"]}) == 1

        assert sql_store.select("votes", {"poll_id": poll_rows[0]["id"]}) == []
        assert sql_store.single("polls", {"id": poll_rows[0]["id"]})["question"] == "Changed"

    def test_update_filtered_on_other_owner_changes_nothing(self, sql_store, poll_rows):
        count = sql_store.update("polls", {"question": "Hijacked"}, {"id": poll_rows[0]["id"], "user_id": "someone"})
        assert count == 0
        assert sql_store.single("polls", {"id": poll_rows[0]["id"]})["question"] == "Question 0"

    def test_delete_returns_count(self, sql_store, poll_rows):
        assert sql_store.delete("polls", {"id": poll_rows[0]["id"]}) == 1
        assert sql_store.delete("polls", {"id": poll_rows[0]["id"]}) == 0

    def test_unfiltered_writes_are_refused(self, sql_store, poll_rows):
        with pytest.raises(StoreError):
            sql_store.delete("polls", {})
        with pytest.raises(StoreError):
            sql_store.update("polls", {"question": "x"}, {})

    def test_unknown_table(self, sql_store):
        with pytest.raises(StoreError, match="Unknown table"):
            sql_store.select("secrets")

    def test_unknown_column(self, sql_store):
        with pytest.raises(StoreError, match="Unknown column"):
            sql_store.select("polls", {"owner": "x"})

    def test_single_not_found(self, sql_store):
        with pytest.raises(NotFoundError):
            sql_store.single("polls", {"id": "missing"})

    def test_single_rejects_many(self, sql_store, poll_rows, user_row):
        with pytest.raises(StoreError):
            sql_store.single("polls", {"user_id": user_row["id"]})
