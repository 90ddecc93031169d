from datetime import datetime

import attrs


@attrs.define
class PointBalance:
    user_id: int
    balance: int
    as_of: datetime
