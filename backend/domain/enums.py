"""
Domain enums for the delivery lifecycle.
"""

from enum import Enum


class DeliveryStatus(str, Enum):
    ORDERED = "ordered"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


class EventType(str, Enum):
    ORDER_CREATED = "OrderCreated"
    ORDER_PROCESSED = "OrderProcessed"
    DELIVERY_UPDATED = "DeliveryUpdated"
