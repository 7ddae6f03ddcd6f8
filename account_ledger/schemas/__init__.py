"""Schemas: immutable Pydantic value objects returned by the store."""
