from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class AuditEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    table_name: str
    record_id: str
    operation: Literal["INSERT", "UPDATE", "DELETE"]
    old_data: Optional[dict] = None
    new_data: Optional[dict] = None
    changed_by_user_id: Optional[str] = None
    changed_by_email: Optional[str] = None
    created_at: datetime
