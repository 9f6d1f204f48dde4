"""
Subscription Repository - storage reader/writer for subscriptions.

Every read is owner-scoped through the caller-supplied user id or the
planned query's filter. SQLAlchemy failures are logged and surfaced as
application errors; nothing is swallowed.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select, func, or_, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.application.errors import ConflictError, DatabaseError, NotFoundError
from app.domain.subscription import SortField, SortOrder, SubscriptionStatus, TransactionStatus
from app.domain.subscription_query import SubscriptionFilter, SubscriptionQuery, SEARCH_FIELDS
from app.infrastructure.db.models import SubscriptionModel, TransactionModel

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    SortField.SERVICE_NAME: SubscriptionModel.service_name,
    SortField.COST: SubscriptionModel.cost,
    SortField.NEXT_BILLING_DATE: SubscriptionModel.next_billing_date,
    SortField.CREATED_AT: SubscriptionModel.created_at,
    SortField.UPDATED_AT: SubscriptionModel.updated_at,
}


def _where_clause(where: SubscriptionFilter):
    conditions = [SubscriptionModel.user_id == where.user_id]
    for attr, value in where.exact_matches().items():
        conditions.append(getattr(SubscriptionModel, attr) == value)
    if where.search is not None:
        conditions.append(or_(*[
            getattr(SubscriptionModel, attr).icontains(where.search, autoescape=True)
            for attr in SEARCH_FIELDS
        ]))
    return and_(*conditions)


class SubscriptionRepository:
    """
    Repository for subscriptions and their transactions

    Usage:
        >>> repo = SubscriptionRepository(db)
        >>> rows, total = repo.find_subscriptions(plan_subscription_query(params, user_id))
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_subscriptions(self, query: SubscriptionQuery) -> tuple[list[SubscriptionModel], int]:
        """
        One page of a user's subscriptions plus the total number of matches.

        Transactions are not loaded; see find_recent_transactions and
        count_transactions.
        """
        where = _where_clause(query.where)
        column = _SORT_COLUMNS[query.sort_by]
        order = column.desc() if query.sort_order is SortOrder.DESC else column.asc()

        stmt = (
            select(SubscriptionModel)
            .where(where)
            .order_by(order, SubscriptionModel.id.asc())
            .offset(query.skip)
            .limit(query.limit)
        )
        count_stmt = select(func.count()).select_from(SubscriptionModel).where(where)

        rows = list(self.db.scalars(stmt).all())
        total = self.db.scalar(count_stmt) or 0
        return rows, total

    def find_recent_transactions(
        self, subscription_ids: list[int], per_subscription: int
    ) -> dict[int, list[TransactionModel]]:
        """
        Latest ``per_subscription`` transactions of each subscription, newest
        first. Rows beyond the limit are cut off in SQL, never loaded.
        """
        if not subscription_ids:
            return {}
        ranked = (
            select(
                TransactionModel.id.label("id"),
                func.row_number().over(
                    partition_by=TransactionModel.subscription_id,
                    order_by=(TransactionModel.date.desc(), TransactionModel.id.desc()),
                ).label("position"),
            )
            .where(TransactionModel.subscription_id.in_(subscription_ids))
            .subquery()
        )
        stmt = (
            select(TransactionModel)
            .join(ranked, TransactionModel.id == ranked.c.id)
            .where(ranked.c.position <= per_subscription)
            .order_by(TransactionModel.date.desc(), TransactionModel.id.desc())
        )
        recent: dict[int, list[TransactionModel]] = {sid: [] for sid in subscription_ids}
        for tx in self.db.scalars(stmt).all():
            recent[tx.subscription_id].append(tx)
        return recent

    def count_transactions(self, subscription_ids: list[int]) -> dict[int, int]:
        """Number of transactions per subscription (0 for none)."""
        if not subscription_ids:
            return {}
        stmt = (
            select(TransactionModel.subscription_id, func.count(TransactionModel.id))
            .where(TransactionModel.subscription_id.in_(subscription_ids))
            .group_by(TransactionModel.subscription_id)
        )
        counts = {sid: 0 for sid in subscription_ids}
        for subscription_id, count in self.db.execute(stmt).all():
            counts[subscription_id] = count
        return counts

    def find_all_for_user(self, user_id: int) -> list[SubscriptionModel]:
        stmt = (
            select(SubscriptionModel)
            .where(SubscriptionModel.user_id == user_id)
            .order_by(SubscriptionModel.id.asc())
        )
        return list(self.db.scalars(stmt).all())

    def find_upcoming_active(self, user_id: int, start: date, end: date) -> list[SubscriptionModel]:
        """Active subscriptions billing within [start, end], soonest first."""
        stmt = (
            select(SubscriptionModel)
            .where(
                SubscriptionModel.user_id == user_id,
                SubscriptionModel.status == SubscriptionStatus.ACTIVE.value,
                SubscriptionModel.next_billing_date >= start,
                SubscriptionModel.next_billing_date <= end,
            )
            .order_by(SubscriptionModel.next_billing_date.asc(), SubscriptionModel.id.asc())
        )
        return list(self.db.scalars(stmt).all())

    def sum_completed_transaction_amounts(self, user_id: int) -> Decimal:
        """Historical spend; counts transactions of subscriptions in any status."""
        stmt = (
            select(func.coalesce(func.sum(TransactionModel.amount), 0))
            .join(SubscriptionModel, TransactionModel.subscription_id == SubscriptionModel.id)
            .where(
                SubscriptionModel.user_id == user_id,
                TransactionModel.status == TransactionStatus.COMPLETED.value,
            )
        )
        total = self.db.scalar(stmt)
        return Decimal(str(total or 0))

    def count_for_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(SubscriptionModel).where(
            SubscriptionModel.user_id == user_id
        )
        return self.db.scalar(stmt) or 0

    def get_for_user(self, subscription_id: int, user_id: int) -> SubscriptionModel:
        """
        Raises:
            NotFoundError: absent, or owned by another user
        """
        stmt = (
            select(SubscriptionModel)
            .where(
                SubscriptionModel.id == subscription_id,
                SubscriptionModel.user_id == user_id,
            )
            .options(selectinload(SubscriptionModel.transactions))
        )
        sub = self.db.scalars(stmt).first()
        if sub is None:
            raise NotFoundError(
                "The requested subscription does not exist or you do not have access to it",
                error="Subscription not found",
            )
        return sub

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, user_id: int, data: dict[str, Any]) -> SubscriptionModel:
        sub = SubscriptionModel(user_id=user_id, **data)
        self.db.add(sub)
        self._commit("create subscription")
        self.db.refresh(sub)
        return sub

    def update(self, subscription_id: int, user_id: int, changes: dict[str, Any]) -> SubscriptionModel:
        sub = self.get_for_user(subscription_id, user_id)
        for attr, value in changes.items():
            setattr(sub, attr, value)
        self._commit("update subscription")
        self.db.refresh(sub)
        return sub

    def delete(self, subscription_id: int, user_id: int) -> None:
        """Delete a subscription; its transactions go with it."""
        sub = self.get_for_user(subscription_id, user_id)
        self.db.delete(sub)
        self._commit("delete subscription")

    def add_transaction(self, subscription_id: int, user_id: int, **fields) -> TransactionModel:
        sub = self.get_for_user(subscription_id, user_id)
        tx = TransactionModel(subscription_id=sub.id, **fields)
        self.db.add(tx)
        self._commit("add transaction")
        self.db.refresh(tx)
        return tx

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.exception("Integrity error on %s", action)
            raise ConflictError("Resource already exists", error="Unique constraint violation") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database error on %s", action)
            raise DatabaseError(f"Unable to {action} at this time") from exc
