# storefront/repos/order_repo.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #bez commita, zamowienie jest czescia wiekszej transakcji
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def _filtered(self, stmt, user_id: int | None, status: str | None):
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return stmt

    def list_orders(
        self,
        user_id: int | None = None,
        status: str | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[OrderModel]:
        stmt = self._filtered(select(OrderModel), user_id, status)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).offset(offset).limit(limit)
        return list(self.db.execute(stmt).scalars())

    def count_orders(self, user_id: int | None = None, status: str | None = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(OrderModel), user_id, status)
        return self.db.execute(stmt).scalar_one()

    def update_order_status(self, order_id: str, old_version: int, status: str) -> int:
        # Optimistic locking, np. update set version 2 where id X and version 1
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.version == old_version)
            .values(
                status=status,
                version=old_version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
