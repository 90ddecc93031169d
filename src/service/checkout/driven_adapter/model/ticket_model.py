from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class TicketModel(Base):
    __tablename__ = 'ticket'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    transaction_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('ticket_transaction.id', ondelete='CASCADE'), nullable=False, index=True
    )
    event_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    tier_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
