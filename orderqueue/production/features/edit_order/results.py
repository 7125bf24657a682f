from dataclasses import dataclass
from typing import Optional


@dataclass
class EditOrderResult:
    order_id: int
    product_a_quantity: int
    product_b_quantity: int
    total_days: Optional[int]
    notes: Optional[str]
    status: str = "success"

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            "order_id": self.order_id,
            "product_a_quantity": self.product_a_quantity,
            "product_b_quantity": self.product_b_quantity,
            "total_days": self.total_days,
            "notes": self.notes,
            "status": self.status
        }
