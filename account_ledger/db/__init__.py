"""Database Infrastructure: SQLAlchemy Base and async session factory.

Invariants:
    - All sessions are async (AsyncSession)
    - aiosqlite for SQLite (default), asyncpg for PostgreSQL
"""
