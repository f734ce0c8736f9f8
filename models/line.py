from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from enum import Enum

class Outcome(str, Enum):
    REMEMBERED = "remembered"
    FORGOTTEN = "forgotten"

class LineBase(BaseModel):
    text_id: int
    line_number: int = Field(ge=0)
    original_line_text: str
    next_review_date: datetime
    interval: int = Field(default=0, ge=0)  # days
    ease_factor: float = 2.5
    repetitions: int = Field(default=0, ge=0)
    lapses: int = Field(default=0, ge=0)
    last_reviewed_at: Optional[datetime] = None
    mask_level: int = Field(default=0, ge=0)  # trailing words hidden

class LineCreate(LineBase):
    pass

class Line(LineBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
