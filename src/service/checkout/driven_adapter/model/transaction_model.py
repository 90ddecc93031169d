from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel


class TransactionModel(Base):
    __tablename__ = 'ticket_transaction'
    __table_args__ = (
        # Sweeper lookup: status = 'pending' AND payment_deadline < now
        Index('ix_ticket_transaction_status_deadline', 'status', 'payment_deadline'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    tier_name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    payment_deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reservation_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, unique=True)
    coupon_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    promotion_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    points_used: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Price breakdown (audit trail)
    base_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    coupon_discount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    promotion_discount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    points_discount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    subtotal_before_tax: Mapped[int] = mapped_column(BigInteger, nullable=False)
    tax_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    final_price: Mapped[int] = mapped_column(BigInteger, nullable=False)

    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    tickets: Mapped[List[TicketModel]] = relationship(
        TicketModel,
        primaryjoin='TransactionModel.id == foreign(TicketModel.transaction_id)',
        viewonly=True,
        lazy='selectin',
        order_by='TicketModel.id',
    )
