"""Infrastructure Layer: database lifecycle and logging setup.

Invariants:
    - Collaborators of the store only; the store never imports from here
"""
