from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class CreateOrderResult:
    order_id: int
    total_days: int
    estimated_completion_date: Optional[date]
    projected_completion_date: date
    days_in_front: int
    queue_errors: int = 0
    status: str = "success"

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            "order_id": self.order_id,
            "total_days": self.total_days,
            "estimated_completion_date": (
                self.estimated_completion_date.isoformat() if self.estimated_completion_date else None
            ),
            "projected_completion_date": self.projected_completion_date.isoformat(),
            "days_in_front": self.days_in_front,
            "queue_errors": self.queue_errors,
            "status": self.status
        }
