from datetime import datetime
from typing import Optional

from pydantic import Field, StrictBool, StrictStr, model_validator

from tarot42.schemas.base import CamelModel


class ProfileUpdateIn(CamelModel):
    # Lengths match the user table columns.

    # Astrological data
    zodiac_sign: Optional[StrictStr] = Field(default=None, max_length=50)
    element: Optional[StrictStr] = Field(default=None, max_length=50)
    selected_element: Optional[StrictStr] = Field(default=None, max_length=50)  # legacy alias of element

    # Personal goals & details
    personal_goals: Optional[StrictStr] = Field(default=None, max_length=200)
    additional_details: Optional[StrictStr] = None
    focus_area: Optional[StrictStr] = Field(default=None, max_length=100)

    # Demographics
    gender: Optional[StrictStr] = Field(default=None, max_length=50)
    age_range: Optional[StrictStr] = Field(default=None, max_length=50)

    # Birth date & time
    birth_date_time: Optional[StrictStr] = Field(default=None, max_length=64)
    include_time: Optional[StrictBool] = None

    # Legacy
    birthday: Optional[StrictStr] = Field(default=None, max_length=64)


class ProfileOut(CamelModel):
    id: str
    name: Optional[str] = None
    email: str
    image: Optional[str] = None

    zodiac_sign: Optional[str] = None
    selected_element: Optional[str] = None
    element: Optional[str] = None

    personal_goals: Optional[str] = None
    additional_details: Optional[str] = None
    focus_area: Optional[str] = None

    gender: Optional[str] = None
    age_range: Optional[str] = None

    birth_date_time: Optional[str] = None
    include_time: Optional[bool] = None

    birthday: Optional[datetime] = None
    age: Optional[int] = None

    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _mirror_element(self) -> "ProfileOut":
        # Older clients read `element`, newer ones `selectedElement`.
        if self.element is None:
            self.element = self.selected_element
        return self


class ProfileUpdateOut(CamelModel):
    message: str
    user: ProfileOut


class CompletenessOut(CamelModel):
    completeness: int
    total_fields: int
    filled_fields: int
    missing_fields: int
