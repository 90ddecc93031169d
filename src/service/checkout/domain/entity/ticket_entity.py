from datetime import datetime
from typing import List, Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import InvalidStateTransitionError


@attrs.define
class Ticket:
    id: UUID
    transaction_id: UUID
    event_id: int
    tier_name: str
    is_used: bool = False
    created_at: Optional[datetime] = None
    used_at: Optional[datetime] = None

    @classmethod
    def issue_for(
        cls, *, transaction_id: UUID, event_id: int, tier_name: str, quantity: int, now: datetime
    ) -> List['Ticket']:
        """One ticket per seat unit."""
        return [
            cls(
                id=uuid7(),
                transaction_id=transaction_id,
                event_id=event_id,
                tier_name=tier_name,
                created_at=now,
            )
            for _ in range(quantity)
        ]

    def check_in(self, *, now: datetime) -> 'Ticket':
        if self.is_used:
            raise InvalidStateTransitionError(f'Ticket {self.id} has already been used')
        return attrs.evolve(self, is_used=True, used_at=now)
