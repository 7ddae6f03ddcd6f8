"""Core Layer: domain types and error hierarchy, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
"""
