from enum import StrEnum


class TransactionStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    EXPIRED = 'expired'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING
