"""
Subscription domain vocabulary - closed value sets and field limits.

Every place that validates or filters on one of these sets imports it from
here; the allowed-value lists are never re-declared per call site.
"""
from decimal import Decimal
from enum import Enum


class BillingCycle(str, Enum):
    """Recurrence interval of a subscription's charge."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"
    APPLE_PAY = "apple_pay"
    GOOGLE_PAY = "google_pay"
    OTHER = "other"


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class SortField(str, Enum):
    """Wire names of the fields a subscription list may be ordered by."""
    SERVICE_NAME = "serviceName"
    COST = "cost"
    NEXT_BILLING_DATE = "nextBillingDate"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Allowed values of a closed set, in declaration order."""
    return [member.value for member in enum_cls]


def parse_enum(enum_cls: type[Enum], value) -> Enum | None:
    """Return the member whose value equals ``value``, or None."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


# Field limits
SERVICE_NAME_MAX_LENGTH = 100
PLAN_TYPE_MAX_LENGTH = 50
CATEGORY_MAX_LENGTH = 50
MAX_COST = Decimal("999999.99")

# Defaults applied when a create payload omits the optional fields
DEFAULT_CATEGORY = "other"
DEFAULT_STATUS = SubscriptionStatus.ACTIVE
DEFAULT_PAYMENT_METHOD = PaymentMethod.CREDIT_CARD
DEFAULT_AUTO_RENEWAL = True
