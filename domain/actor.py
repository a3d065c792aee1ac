"""
Domain: Actor (authenticated caller).

Roles come from the auth provider's user metadata:
- creator / influencer: may create orders and affiliate links
- brand: lists products
- admin: may run fraud detection and payout generation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

CREATOR_ROLES = frozenset({"creator", "influencer"})
ADMIN_ROLE = "admin"


@dataclass(frozen=True, slots=True)
class Actor:
    actor_id: UUID
    role: Optional[str] = None
    email: Optional[str] = None

    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def can_create_orders(self) -> bool:
        """Check if the actor is a creator-class account."""
        return self.role in CREATOR_ROLES
