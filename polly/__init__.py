"""Polly: polls with authenticated, one-per-user voting."""
