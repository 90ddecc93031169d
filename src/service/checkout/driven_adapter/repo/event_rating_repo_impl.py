from typing import Optional

from sqlalchemy import func, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.storage_error import translate_storage_errors
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_event_rating_repo import IEventRatingRepo
from src.service.checkout.driven_adapter.model.event_model import EventModel
from src.service.checkout.driven_adapter.model.review_model import ReviewModel


class EventRatingRepoImpl(IEventRatingRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def recompute_average_rating(self, *, event_id: int) -> Optional[float]:
        with translate_storage_errors('rating recompute'):
            result = await self.session.execute(
                select(func.avg(ReviewModel.rating)).where(ReviewModel.event_id == event_id)
            )
            raw_average = result.scalar_one_or_none()
            average = round(float(raw_average), 2) if raw_average is not None else None

            await self.session.execute(
                sql_update(EventModel)
                .where(EventModel.id == event_id)
                .values(average_rating=average)
                .execution_options(synchronize_session=False)
            )
        return average
