"""
Core utilities shared across the person directory.

This package hosts configuration helpers (env vars, backend selection) and
the logging setup. Routers/services should depend on these primitives
instead of reading os.environ directly.
"""
