"""Strongly typed identifiers for Geist meta entities.

Using NewType keeps user and identity IDs from being mixed up while
staying plain UUIDs at runtime.
"""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
IdentityId = NewType("IdentityId", UUID)
