"""
SQLAlchemy ORM models for the Deliveries service.

Tables:
    deliveries   — one row per order being delivered
    restaurants  — seed collection loaded at first boot
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, JSON, Index

from database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Delivery(Base):
    """Lifecycle record of a single order's fulfillment."""
    __tablename__ = "deliveries"

    id = Column(String(64), primary_key=True, default=_new_id)
    user_id = Column(JSON, nullable=False)  # opaque, stored as sent
    driver_id = Column(String(64), nullable=True)  # set once, on ordered -> in_transit
    status = Column(String(20), nullable=False, default="ordered")  # "ordered" | "in_transit" | "delivered"

    # Order payload, carried through unchanged
    foods = Column(JSON, nullable=False)
    time = Column(JSON, nullable=False)
    total_price = Column(JSON, nullable=False)
    extra = Column(JSON, nullable=False, default=dict)  # any other fields of the inbound event

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_deliveries_status", "status"),
    )

    def to_dict(self) -> dict:
        """Wire representation, keyed the way the other services expect."""
        data = dict(self.extra or {})
        data.update({
            "_id": self.id,
            "userId": self.user_id,
            "status": self.status,
            "foods": self.foods,
            "time": self.time,
            "totalPrice": self.total_price,
        })
        if self.driver_id is not None:
            data["driverId"] = self.driver_id
        if self.created_at is not None:
            data["createdAt"] = self.created_at.isoformat()
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at.isoformat()
        return data


class Restaurant(Base):
    """Restaurants seeded once at first boot."""
    __tablename__ = "restaurants"

    id = Column(String(64), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    cuisine = Column(String(100), nullable=True)
    address = Column(String(300), nullable=True)
    menu = Column(JSON, nullable=False, default=list)
