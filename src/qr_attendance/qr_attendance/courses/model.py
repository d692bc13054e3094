from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Course:
    code: str
    name: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {"code": self.code, "name": self.name}
