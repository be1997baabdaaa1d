"""Schema for the liveness probe."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class HealthRead(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: datetime
    uptime: float
