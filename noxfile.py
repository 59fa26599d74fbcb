import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
# Default sessions when running "nox"
nox.options.sessions = ["lint", "tests"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "SECRET_KEY",
    "ENVIRONMENT",
    "DATABASE_URL",
    "CSRF_TOKEN_STORE",
]


def _set_env(session):
    """
    Propagate configuration environment variables into the session.
    Also ensure the project root is on PYTHONPATH.
    """
    session.env["PYTHONPATH"] = str(Path.cwd())
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "polly/", "tests/")
    session.run("black", "polly/", "tests/")
    session.run("flake8", "polly/", "tests/")
    session.run("mypy", "polly/")


@nox.session(name="tests")
def tests(session):
    """
    Run the test suite against in-memory SQLite.
    Pass positional args to target specific tests.
    Usage:
      nox -s tests                                   # everything under tests/
      nox -s tests -- tests/unit/test_core/test_csrf.py  # one module
      nox -s tests -- -m unit                        # unit tests only
    """
    _set_env(session)
    session.install("-e", ".[test]")
    args = session.posargs or ["tests"]
    session.run(
        "pytest",
        *args,
        "-vv",
        "--tb=short",
        "--cov=polly",
        "--cov-report=term-missing",
        "--cov-fail-under=80",
    )
