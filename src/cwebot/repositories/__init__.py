"""
Table-level CRUD helpers.

Every repository exposes static coroutines that take an open
``aiosqlite.Connection`` as their first argument and never commit; the
caller decides the transaction boundary.
"""
