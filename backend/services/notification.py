from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class NotificationResult:
    ok: bool
    error: Optional[str] = None
