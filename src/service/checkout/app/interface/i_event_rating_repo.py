from abc import ABC, abstractmethod
from typing import Optional


class IEventRatingRepo(ABC):
    @abstractmethod
    async def recompute_average_rating(self, *, event_id: int) -> Optional[float]:
        """Average of the event's review ratings (2 decimals), stored on the event"""
        pass
