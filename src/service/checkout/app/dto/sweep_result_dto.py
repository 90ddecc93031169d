import attrs


@attrs.define
class SweepResult:
    """Outcome of one expiration sweep"""

    expired_count: int = 0
    expired_points_count: int = 0
    failed_count: int = 0
