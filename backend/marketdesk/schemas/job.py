from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel

JobStatus = Literal["queued", "started", "deferred", "scheduled", "finished", "failed", "stopped", "canceled"]


class JobResponse(BaseModel):
    job_id: str
    status: JobStatus
    result: Optional[Any] = None
