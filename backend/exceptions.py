"""
Custom exception classes for event bus operations.
"""


class EventBusError(Exception):
    """Raised when an event could not be delivered to the event bus."""
    pass


class SubscriptionError(EventBusError):
    """Raised when the service could not register its subscriptions."""
    pass
