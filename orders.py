"""
Order service: submission with payment proof, status changes, payment
verification and purging of completed orders
"""

import json
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

import pydantic
import structlog
from fastapi import UploadFile
from sqlalchemy import case, delete, desc, select, update

from database import Database
from errors import NotFoundError, ValidationError
from models import ORDER_STATUSES, STATUS_RANK, OrderModel, utc_isoformat
from schemas import order_lines
from uploads import UploadStore, is_attached, public_url

logger = structlog.get_logger()


def serialize_order(order: OrderModel, origin: str) -> Dict[str, Any]:
    return {
        "id": order.id,
        "customerName": order.customer_name,
        "phoneNumber": order.phone_number,
        "numberOfPeople": order.number_of_people,
        "items": json.loads(order.items),
        "status": order.status,
        "timestamp": order.timestamp,
        "paymentProof": order.payment_proof,
        "paymentProofUrl": public_url(origin, order.payment_proof),
        "verified": bool(order.verified),
    }


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_items(raw: str) -> List[Dict[str, Any]]:
    """Decode the submitted item list and check its shape; returns the items as sent"""
    # NaN, Infinity and overflowing numbers would be stored but never serialize back out
    try:
        items = json.loads(raw, parse_float=_finite_float, parse_constant=_reject_constant)
    except ValueError:
        raise ValidationError("Invalid items format")

    if not isinstance(items, list) or not items:
        raise ValidationError("Invalid items format")

    try:
        order_lines.validate_python(items)
    except pydantic.ValidationError:
        raise ValidationError("Invalid items format")

    return items


def parse_party_size(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return 1
    try:
        size = int(raw)
    except ValueError:
        raise ValidationError("Invalid number of people")
    if size < 1:
        raise ValidationError("Invalid number of people")
    return size


def parse_reservation_time(raw: Optional[str]) -> str:
    """Reservation time as UTC ISO text; naive values are server-local. Defaults to now."""
    if raw is None or not raw.strip():
        return utc_isoformat()
    try:
        moment = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Invalid reservation time")
    return utc_isoformat(moment)


class OrderService:
    def __init__(self, db: Database, uploads: UploadStore):
        self.db = db
        self.uploads = uploads

    async def list_orders(self, origin: str) -> List[Dict[str, Any]]:
        """All orders, by status rank then newest first"""
        rank = case(STATUS_RANK, value=OrderModel.status, else_=len(STATUS_RANK) + 1)

        async with self.db.session() as session:
            result = await session.execute(
                select(OrderModel).order_by(rank, desc(OrderModel.timestamp), desc(OrderModel.id))
            )
            orders = result.scalars().all()

        return [serialize_order(order, origin) for order in orders]

    async def create_order(
        self,
        origin: str,
        customer_name: Optional[str],
        phone_number: Optional[str],
        items: Optional[str],
        payment_proof: Optional[UploadFile],
        number_of_people: Optional[str] = None,
        reservation_time: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not customer_name or not phone_number or not items:
            raise ValidationError("Missing required fields")

        line_items = parse_items(items)

        if not is_attached(payment_proof):
            raise ValidationError("Payment proof is required")

        party_size = parse_party_size(number_of_people)
        timestamp = parse_reservation_time(reservation_time)

        proof_filename = await self.uploads.save(payment_proof)

        order = OrderModel(
            customer_name=customer_name,
            phone_number=phone_number,
            number_of_people=party_size,
            items=json.dumps(line_items),
            status="pending",
            timestamp=timestamp,
            payment_proof=proof_filename,
            verified=False,
        )

        async with self.db.session() as session:
            session.add(order)
            await session.commit()
            await session.refresh(order)

        logger.info(
            "order_created",
            order_id=order.id,
            items_count=len(line_items),
            party_size=party_size,
        )
        return serialize_order(order, origin)

    async def update_status(self, order_id: int, status: Any) -> Dict[str, Any]:
        # Any known status may be set from any other; there is no transition table
        if not status or status not in ORDER_STATUSES:
            raise ValidationError("Invalid status")

        async with self.db.session() as session:
            result = await session.execute(
                update(OrderModel).where(OrderModel.id == order_id).values(status=status)
            )
            await session.commit()

        if result.rowcount == 0:
            raise NotFoundError("Order not found")

        logger.info("order_status_updated", order_id=order_id, status=status)
        return {"success": True, "message": f"Order status updated to {status}"}

    async def verify_payment(self, order_id: int, verified: Any) -> Dict[str, Any]:
        """Setting verified moves the order to preparing; clearing it leaves status alone"""
        if not isinstance(verified, bool):
            raise ValidationError("Invalid verification status")

        values = {"verified": verified}
        if verified:
            values["status"] = "preparing"

        async with self.db.session() as session:
            result = await session.execute(
                update(OrderModel).where(OrderModel.id == order_id).values(**values)
            )
            await session.commit()

        if result.rowcount == 0:
            raise NotFoundError("Order not found")

        logger.info("payment_verification_updated", order_id=order_id, verified=verified)
        if verified:
            message = "Payment verified and order moved to preparing"
        else:
            message = "Payment verification removed"
        return {"success": True, "message": message}

    async def purge_completed(self) -> int:
        async with self.db.session() as session:
            result = await session.execute(
                delete(OrderModel).where(OrderModel.status == "completed")
            )
            await session.commit()

        logger.info("completed_orders_purged", deleted=result.rowcount)
        return result.rowcount
