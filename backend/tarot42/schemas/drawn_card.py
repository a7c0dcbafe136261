from datetime import datetime
from typing import Optional

from pydantic import Field, StrictBool, StrictStr

from tarot42.schemas.base import CamelModel


class DrawnCardCreateIn(CamelModel):
    card_name: Optional[StrictStr] = Field(default=None, max_length=100)
    card_upright: StrictBool = True
    reading_context: Optional[StrictStr] = None


class DrawnCardOut(CamelModel):
    id: int
    user_id: str
    card_name: str
    card_upright: bool
    reading_context: Optional[str] = None
    drawn_at: datetime
