"""
Request payloads
"""

from typing import Any, List

from pydantic import BaseModel, Field, TypeAdapter


class OrderLine(BaseModel):
    """One entry of an order's item list. Unknown keys are kept as submitted."""
    name: str = Field(..., min_length=1, strict=True)
    price: float = Field(..., ge=0, strict=True, allow_inf_nan=False)
    quantity: int = Field(..., ge=1, strict=True)


order_lines = TypeAdapter(List[OrderLine])


class StatusUpdate(BaseModel):
    # Checked against the known statuses by the order service
    status: Any = None


class VerifyUpdate(BaseModel):
    # Checked for a real boolean by the order service, so "true" or 1 are rejected
    verified: Any = None
