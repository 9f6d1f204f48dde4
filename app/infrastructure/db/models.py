"""
SQLAlchemy ORM models
"""
from decimal import Decimal
from datetime import date as date_type, datetime

from sqlalchemy import (
    String, Text, Integer, Boolean, Numeric, Date, TIMESTAMP, ForeignKey, Index, func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domain.subscription import (
    DEFAULT_CATEGORY, DEFAULT_STATUS, DEFAULT_PAYMENT_METHOD,
    SERVICE_NAME_MAX_LENGTH, PLAN_TYPE_MAX_LENGTH, CATEGORY_MAX_LENGTH,
)
from app.infrastructure.db.session import Base


class User(Base):
    """Account owning subscriptions"""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    subscriptions: Mapped[list["SubscriptionModel"]] = relationship(
        back_populates="user", cascade="all, delete-orphan",
    )


# ============================================================================
# Subscriptions
# ============================================================================


class SubscriptionModel(Base):
    """A recurring charge tracked for one user"""
    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    service_name: Mapped[str] = mapped_column(String(SERVICE_NAME_MAX_LENGTH), nullable=False)
    plan_type: Mapped[str] = mapped_column(String(PLAN_TYPE_MAX_LENGTH), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    billing_cycle: Mapped[str] = mapped_column(String(16), nullable=False)  # daily..yearly
    next_billing_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=DEFAULT_STATUS.value, server_default=DEFAULT_STATUS.value
    )
    category: Mapped[str] = mapped_column(
        String(CATEGORY_MAX_LENGTH), nullable=False, default=DEFAULT_CATEGORY, server_default=DEFAULT_CATEGORY
    )
    payment_method: Mapped[str] = mapped_column(
        String(32), nullable=False,
        default=DEFAULT_PAYMENT_METHOD.value, server_default=DEFAULT_PAYMENT_METHOD.value,
    )
    auto_renewal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user: Mapped[User] = relationship(back_populates="subscriptions")
    transactions: Mapped[list["TransactionModel"]] = relationship(
        back_populates="subscription",
        cascade="all, delete-orphan",
        order_by="TransactionModel.date.desc()",
    )

    __table_args__ = (
        Index("ix_subscriptions_user_next_billing", "user_id", "next_billing_date"),
        Index("ix_subscriptions_user_status", "user_id", "status"),
    )


class TransactionModel(Base):
    """A payment recorded against a subscription (immutable once written)"""
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    subscription_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)  # completed, pending, failed
    receipt_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    subscription: Mapped[SubscriptionModel] = relationship(back_populates="transactions")
