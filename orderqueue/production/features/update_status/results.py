from dataclasses import dataclass
from typing import Optional


@dataclass
class StatusUpdateResult:
    order_id: int
    from_status: str
    to_status: str
    queue_recalculated: bool
    queue_errors: int = 0
    completed_at: Optional[str] = None
    status: str = "success"

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            "order_id": self.order_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "queue_recalculated": self.queue_recalculated,
            "queue_errors": self.queue_errors,
            "completed_at": self.completed_at,
            "status": self.status
        }
