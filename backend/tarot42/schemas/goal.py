from datetime import datetime
from typing import Optional

from pydantic import StrictBool, StrictStr

from tarot42.schemas.base import CamelModel


class GoalCreateIn(CamelModel):
    # Presence and emptiness are checked in the route so both map to 400.
    goal_text: Optional[StrictStr] = None


class GoalUpdateIn(CamelModel):
    goal_text: Optional[StrictStr] = None
    is_achieved: Optional[StrictBool] = None


class GoalOut(CamelModel):
    id: int
    user_id: str
    goal_text: str
    is_achieved: bool
    created_at: datetime
    updated_at: datetime


class GoalEnvelopeOut(CamelModel):
    message: str
    goal: GoalOut
