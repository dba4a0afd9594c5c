"""Core: settings, database wiring and password/session-token security helpers."""
