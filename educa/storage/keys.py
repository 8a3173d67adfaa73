"""
Storage keys for the persisted collections and the session marker.

The names match what earlier prototypes wrote, so existing data directories
keep hydrating after an upgrade.
"""
from __future__ import annotations

USERS_KEY = "educa_users"
MATERIALS_KEY = "educa_materials"
ASSIGNMENTS_KEY = "educa_assignments"
SUBMISSIONS_KEY = "educa_submissions"
SESSION_KEY = "educa_current_user_id"

COLLECTION_KEYS = (USERS_KEY, MATERIALS_KEY, ASSIGNMENTS_KEY, SUBMISSIONS_KEY)
ALL_KEYS = COLLECTION_KEYS + (SESSION_KEY,)

__all__ = [
    "USERS_KEY",
    "MATERIALS_KEY",
    "ASSIGNMENTS_KEY",
    "SUBMISSIONS_KEY",
    "SESSION_KEY",
    "COLLECTION_KEYS",
    "ALL_KEYS",
]
