from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Player(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    google_sub: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    last_login_at: Optional[datetime] = None
