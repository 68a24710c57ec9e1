"""
Database tables: orders, menu and promotions
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

ORDER_STATUSES = ("pending", "preparing", "ready", "completed")

# Listing priority; anything unknown sorts after completed
STATUS_RANK = {status: rank for rank, status in enumerate(ORDER_STATUSES, start=1)}


def utc_isoformat(moment: Optional[datetime] = None) -> str:
    """Render a moment as a UTC ISO-8601 string with millisecond precision, e.g. 2026-10-19T08:30:00.000Z"""
    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OrderModel(Base):
    __tablename__ = "orders"
    # AUTOINCREMENT keeps ids strictly increasing across purges
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column("customerName", String, nullable=False)
    phone_number = Column("phoneNumber", String, nullable=False)
    number_of_people = Column("numberOfPeople", Integer, default=1)
    items = Column(Text, nullable=False)  # JSON-encoded list of line items
    status = Column(String, default="pending")  # pending, preparing, ready, completed
    timestamp = Column(String, default=lambda: utc_isoformat())
    payment_proof = Column("paymentProof", String, nullable=True)
    verified = Column(Boolean, default=False)


class MenuItemModel(Base):
    __tablename__ = "menu"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    image_path = Column("imagePath", String, nullable=True)
    timestamp = Column(String, default=lambda: utc_isoformat())


class PromotionModel(Base):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    image_path = Column("imagePath", String, nullable=False)
    date = Column(String, nullable=False)
    timestamp = Column(String, default=lambda: utc_isoformat())
