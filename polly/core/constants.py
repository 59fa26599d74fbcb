"""Application constants.

Limits and fixed strings shared by the validation and guard layers.
"""

# Poll input limits
MAX_QUESTION_LENGTH = 500
MAX_OPTION_LENGTH = 200
MIN_POLL_OPTIONS = 2

# Substrings rejected in free text (denylist, see sanitization module)
BLOCKED_PATTERNS = ("<script", "javascript:")

# CSRF token: 32 random bytes, hex encoded, valid for one hour
CSRF_TOKEN_BYTES = 32
CSRF_TOKEN_TTL_SECONDS = 60 * 60
CSRF_COOKIE_NAME = "csrf_token"

# Identity session lifetime in minutes (1 week)
SESSION_EXPIRE_MINUTES = 60 * 24 * 7

# Password policy for sign-up
MIN_PASSWORD_LENGTH = 6

# Table names in the row store
POLLS_TABLE = "polls"
VOTES_TABLE = "votes"
USERS_TABLE = "users"
