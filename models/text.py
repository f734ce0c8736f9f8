from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class TextBase(BaseModel):
    title: str
    author: Optional[str] = None

class TextUpdate(BaseModel):
    """Partial update; only fields explicitly set are written."""
    title: Optional[str] = None
    author: Optional[str] = None
    last_reviewed_at: Optional[datetime] = None
    max_unlocked_line_number: Optional[int] = Field(default=None, ge=0)

class Text(TextBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    created_at: datetime
    last_reviewed_at: Optional[datetime] = None
    max_unlocked_line_number: int = 0  # 0-indexed, first line unlocked
