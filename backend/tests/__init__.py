"""
Pytest test suite for the Deliveries service.

Test categories:
- Unit tests: state machine and request parsing, no I/O
- Service tests: DeliveryService against in-memory SQLite and a recording bus
- API tests: full FastAPI app through an ASGI client
"""
