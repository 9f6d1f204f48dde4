"""
Subscription use cases: list, CRUD and spend analytics.

Use cases receive the repository explicitly and the requester's user id by
value; nothing here reads request state.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

from app.application.errors import ValidationError
from app.domain.subscription import (
    DEFAULT_CATEGORY, DEFAULT_STATUS, DEFAULT_PAYMENT_METHOD, DEFAULT_AUTO_RENEWAL,
)
from app.domain.subscription_analytics import (
    AnalyticsSnapshot, aggregate_subscription_analytics, renewal_window, UPCOMING_WINDOW_DAYS,
)
from app.domain.subscription_query import SubscriptionQuery, plan_subscription_query
from app.domain.subscription_validation import validate_subscription_input
from app.infrastructure.db.models import SubscriptionModel, TransactionModel
from app.infrastructure.db.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validated(data: Mapping[str, Any], is_update: bool) -> dict[str, Any]:
    result = validate_subscription_input(data, is_update=is_update)
    if not result.is_valid:
        raise ValidationError(details=result.errors)
    return result.sanitized


# ============================================================================
# Queries
# ============================================================================


@dataclass(frozen=True)
class SubscriptionPage:
    rows: list[SubscriptionModel]
    query: SubscriptionQuery
    total: int
    # subscription id -> newest transactions / full transaction count
    recent_transactions: dict[int, list[TransactionModel]] = field(default_factory=dict)
    transaction_counts: dict[int, int] = field(default_factory=dict)

    def pagination(self) -> dict:
        return self.query.pagination(self.total)


class ListSubscriptionsUseCase:
    """One page of a user's subscriptions, each with its latest payments."""

    RECENT_TRANSACTIONS = 5

    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    def execute(self, user_id: int, params: Mapping[str, Any]) -> SubscriptionPage:
        query = plan_subscription_query(params, user_id)
        rows, total = self.repo.find_subscriptions(query)
        ids = [sub.id for sub in rows]
        return SubscriptionPage(
            rows=rows,
            query=query,
            total=total,
            recent_transactions=self.repo.find_recent_transactions(ids, self.RECENT_TRANSACTIONS),
            transaction_counts=self.repo.count_transactions(ids),
        )


class GetSubscriptionUseCase:
    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    def execute(self, subscription_id: int, user_id: int) -> SubscriptionModel:
        return self.repo.get_for_user(subscription_id, user_id)


class SubscriptionAnalyticsService:
    """
    Spend analytics for one user.

    ``clock`` supplies the reference moment; tests pin it.
    """

    def __init__(
        self,
        repo: SubscriptionRepository,
        clock: Callable[[], datetime] = _utcnow,
        window_days: int = UPCOMING_WINDOW_DAYS,
    ):
        self.repo = repo
        self.clock = clock
        self.window_days = window_days

    def get_snapshot(self, user_id: int, now: datetime | date | None = None) -> AnalyticsSnapshot:
        if now is None:
            now = self.clock()
        start, end = renewal_window(now, self.window_days)

        subscriptions = self.repo.find_all_for_user(user_id)
        upcoming = self.repo.find_upcoming_active(user_id, start, end)
        total_spent = self.repo.sum_completed_transaction_amounts(user_id)

        return aggregate_subscription_analytics(
            subscriptions,
            total_spent,
            now,
            upcoming=upcoming,
            window_days=self.window_days,
        )


# ============================================================================
# Mutations
# ============================================================================


class CreateSubscriptionUseCase:
    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    def execute(self, user_id: int, data: Mapping[str, Any]) -> SubscriptionModel:
        """
        Raises:
            ValidationError: every violated rule listed in ``details``
        """
        fields = _validated(data, is_update=False)
        fields.setdefault("status", DEFAULT_STATUS.value)
        fields.setdefault("category", DEFAULT_CATEGORY)
        fields.setdefault("payment_method", DEFAULT_PAYMENT_METHOD.value)
        fields.setdefault("auto_renewal", DEFAULT_AUTO_RENEWAL)

        sub = self.repo.create(user_id, fields)
        logger.info("Subscription %s created for user %s", sub.id, user_id)
        return sub


class UpdateSubscriptionUseCase:
    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    def execute(self, subscription_id: int, user_id: int, data: Mapping[str, Any]) -> SubscriptionModel:
        """
        Partial update: only fields present in ``data`` change.

        Raises:
            ValidationError: invalid field values
            NotFoundError: subscription absent or not owned by the user
        """
        changes = _validated(data, is_update=True)
        return self.repo.update(subscription_id, user_id, changes)


class DeleteSubscriptionUseCase:
    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    def execute(self, subscription_id: int, user_id: int) -> None:
        self.repo.delete(subscription_id, user_id)
        logger.info("Subscription %s deleted for user %s", subscription_id, user_id)
