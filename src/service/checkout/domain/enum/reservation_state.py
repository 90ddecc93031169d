from enum import StrEnum


class ReservationState(StrEnum):
    """Lifecycle of a seat hold: HELD -> COMMITTED (paid) | RELEASED (expired/cancelled)"""

    HELD = 'held'
    COMMITTED = 'committed'
    RELEASED = 'released'
