"""
Delivery Store — persistence adapter for Delivery records.

The service needs three things from storage: insert-one, find-by-id and an
atomic conditional update. The conditional update is a single
`UPDATE ... WHERE id = ? AND status = ?` statement, so two concurrent requests
on the same delivery cannot both apply a change from the same starting status;
the loser sees zero rows updated and re-reads.

Every method commits its own unit of work. Database faults surface as
StoreError (503), since there is nothing the service can do locally.
"""
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Delivery
from domain.errors import StoreError

logger = logging.getLogger(__name__)


class DuplicateDeliveryError(Exception):
    """Raised when inserting a delivery whose id already exists."""
    def __init__(self, delivery_id: str):
        super().__init__(f"Delivery {delivery_id} already exists")
        self.delivery_id = delivery_id


class DeliveryStore:
    """Async SQLAlchemy-backed record store for deliveries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_one(self, **values) -> Delivery:
        """Insert a new delivery and return it with its generated id."""
        if values.get("id") is None:
            values.pop("id", None)
        delivery = Delivery(**values)
        self.db.add(delivery)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateDeliveryError(values.get("id", ""))
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Delivery insert failed: {e}")
            raise StoreError()
        await self.db.refresh(delivery)
        return delivery

    async def find_by_id(self, delivery_id: str) -> Optional[Delivery]:
        try:
            return await self.db.get(Delivery, delivery_id, populate_existing=True)
        except SQLAlchemyError as e:
            logger.error(f"Delivery lookup failed for {delivery_id}: {e}")
            raise StoreError()

    async def update_if_status(
        self,
        delivery_id: str,
        expected_status: str,
        changes: dict,
    ) -> Optional[Delivery]:
        """
        Apply `changes` only if the delivery is still in `expected_status`.

        Returns:
            The updated delivery, or None if no row matched (unknown id or a
            concurrent change moved the status first).
        """
        stmt = (
            update(Delivery)
            .where(Delivery.id == delivery_id, Delivery.status == expected_status)
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                return None
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Delivery update failed for {delivery_id}: {e}")
            raise StoreError()

        return await self.find_by_id(delivery_id)
