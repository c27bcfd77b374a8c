from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ReportingType


@dataclass(frozen=True)
class Task:
    task_id: int
    project_id: int
    reporting_type: ReportingType
    name: Optional[str] = None
