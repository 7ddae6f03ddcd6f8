"""Services Layer: the account store and the caller-side OCC retry helper.

Invariants:
    - AccountStore holds no mutable state between calls
    - Retry policy lives outside the store
"""
