"""
Domain constants used across services/routers.
"""

# Marks an OrderCreated payload as coming from the deliveries service
DELIVERY_PAYLOAD_TYPE = "delivery"

# Fields an order payload must carry before it can become a Delivery
REQUIRED_ORDER_FIELDS = ("userId", "time", "foods", "totalPrice")

# Response messages (kept identical to what the other services already parse)
MSG_OK = "ok"
MSG_BODY_INCOMPLETE = "Body not complete."
MSG_INSUFFICIENT_FUNDS = "Insufficient Funds."
MSG_DELIVERY_ADDED = "Delivery successfully Added"
MSG_DELIVERY_CREATED = "Delivery successfully Created"
MSG_DRIVER_ASSIGNED = "Driver successfully assigned."
MSG_DELIVERY_COMPLETED = "Delivery has been completed."
