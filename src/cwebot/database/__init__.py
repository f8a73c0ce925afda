"""
Database package for CWE Bot.

Public API:
    - Database: data access layer coordinating the repositories
    - ConnectionManager: owner of the single aiosqlite connection
    - SchemaManager: table and index creation
"""
