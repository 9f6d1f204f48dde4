"""
Subscription API endpoints
"""
import datetime as dt
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.api.deps import get_current_user, get_subscription_repository
from app.application.accounts import AuthenticatedUser
from app.application.subscriptions import (
    ListSubscriptionsUseCase, GetSubscriptionUseCase, CreateSubscriptionUseCase,
    UpdateSubscriptionUseCase, DeleteSubscriptionUseCase, SubscriptionAnalyticsService,
)
from app.config import get_settings
from app.infrastructure.db.models import SubscriptionModel, TransactionModel
from app.infrastructure.db.subscription_repository import SubscriptionRepository


router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])

# List items carry only the most recent transactions
RECENT_TRANSACTIONS = ListSubscriptionsUseCase.RECENT_TRANSACTIONS


# === Response models ===

class _CamelModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class TransactionResponse(_CamelModel):
    id: int
    subscription_id: int
    amount: float
    date: dt.date
    payment_method: str
    status: str
    receipt_url: str | None = None
    created_at: dt.datetime | None = None


class SubscriptionResponse(_CamelModel):
    id: int
    user_id: int
    service_name: str
    plan_type: str
    cost: float
    billing_cycle: str
    next_billing_date: dt.date
    status: str
    category: str
    payment_method: str
    auto_renewal: bool
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    transactions: list[TransactionResponse] = []
    transaction_count: int = 0


def serialize_subscription(
    sub: SubscriptionModel,
    transactions: list[TransactionModel] | None = None,
    transaction_count: int | None = None,
) -> dict:
    """
    camelCase JSON of a subscription with its transactions (newest first).

    Without ``transactions`` the full loaded history is shown.
    """
    if transactions is None:
        transactions = list(sub.transactions)
    if transaction_count is None:
        transaction_count = len(transactions)
    response = SubscriptionResponse(
        id=sub.id,
        user_id=sub.user_id,
        service_name=sub.service_name,
        plan_type=sub.plan_type,
        cost=sub.cost,
        billing_cycle=sub.billing_cycle,
        next_billing_date=sub.next_billing_date,
        status=sub.status,
        category=sub.category,
        payment_method=sub.payment_method,
        auto_renewal=sub.auto_renewal,
        created_at=sub.created_at,
        updated_at=sub.updated_at,
        transactions=[TransactionResponse.model_validate(tx) for tx in transactions],
        transaction_count=transaction_count,
    )
    return response.model_dump(by_alias=True, mode="json")


# === Endpoints ===

@router.get("")
def list_subscriptions(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    """Paginated, filtered and sorted list of the requester's subscriptions"""
    page = ListSubscriptionsUseCase(repo).execute(user.user_id, dict(request.query_params))
    return {
        "message": "Subscriptions retrieved successfully",
        "data": [
            serialize_subscription(
                sub,
                transactions=page.recent_transactions.get(sub.id, []),
                transaction_count=page.transaction_counts.get(sub.id, 0),
            )
            for sub in page.rows
        ],
        "pagination": page.pagination(),
    }


@router.post("", status_code=201)
def create_subscription(
    payload: dict[str, Any] = Body(...),
    user: AuthenticatedUser = Depends(get_current_user),
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    sub = CreateSubscriptionUseCase(repo).execute(user.user_id, payload)
    return JSONResponse(
        status_code=201,
        content={
            "message": "Subscription created successfully",
            "data": serialize_subscription(sub),
        },
    )


@router.get("/analytics")
def get_analytics(
    user: AuthenticatedUser = Depends(get_current_user),
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    """Overview totals, upcoming renewals and category breakdown"""
    service = SubscriptionAnalyticsService(repo, window_days=get_settings().UPCOMING_RENEWAL_DAYS)
    snapshot = service.get_snapshot(user.user_id)
    return {
        "message": "Analytics retrieved successfully",
        "data": snapshot.to_dict(),
    }


@router.get("/{subscription_id}")
def get_subscription(
    subscription_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    sub = GetSubscriptionUseCase(repo).execute(subscription_id, user.user_id)
    return {
        "message": "Subscription retrieved successfully",
        "data": serialize_subscription(sub),
    }


@router.put("/{subscription_id}")
def update_subscription(
    subscription_id: int,
    payload: dict[str, Any] = Body(...),
    user: AuthenticatedUser = Depends(get_current_user),
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    """Partial update; absent fields keep their values"""
    sub = UpdateSubscriptionUseCase(repo).execute(subscription_id, user.user_id, payload)
    return {
        "message": "Subscription updated successfully",
        "data": serialize_subscription(
            sub,
            transactions=repo.find_recent_transactions([sub.id], RECENT_TRANSACTIONS)[sub.id],
            transaction_count=repo.count_transactions([sub.id])[sub.id],
        ),
    }


@router.delete("/{subscription_id}")
def delete_subscription(
    subscription_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    DeleteSubscriptionUseCase(repo).execute(subscription_id, user.user_id)
    return {"message": "Subscription deleted successfully"}
