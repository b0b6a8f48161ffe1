"""Strongly typed identifiers for mailpool domain entities.

Invite and card-key identifiers are short random strings embedded in the
sealed payload, not database keys, so they wrap ``str``.
"""

from typing import NewType

InviteId = NewType("InviteId", str)
CardKeyId = NewType("CardKeyId", str)
UserId = NewType("UserId", str)

# Width of every user id column
MAX_USER_ID_LENGTH = 255
