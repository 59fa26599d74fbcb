from .admin import admin_delete_poll, assert_admin, list_all_polls
from .auth import get_current_user, login, logout, register
from .context import RequestContext
from .ownership import assert_owner, fetch_owned_poll
from .poll import (
    create_poll,
    delete_poll,
    get_poll_by_id,
    get_poll_for_edit,
    get_user_polls,
    update_poll,
)
from .vote import get_poll_results, has_user_voted, submit_vote

__all__ = [
    # context
    "RequestContext",
    # polls
    "create_poll",
    "update_poll",
    "delete_poll",
    "get_poll_by_id",
    "get_poll_for_edit",
    "get_user_polls",
    # votes
    "submit_vote",
    "get_poll_results",
    "has_user_voted",
    # guards
    "assert_owner",
    "fetch_owned_poll",
    "assert_admin",
    # admin
    "list_all_polls",
    "admin_delete_poll",
    # auth
    "login",
    "register",
    "logout",
    "get_current_user",
]
