"""
Subscription input validation (create and partial update).

Rules:
  - create: serviceName, planType, cost, billingCycle, nextBillingDate required
  - update: every field optional, but a present field (null included) obeys
    the create rules
  - serviceName / planType / category: trimmed strings within length limits
  - cost: number in [0, 999999.99]
  - billingCycle / status / paymentMethod: members of their closed sets
  - nextBillingDate: a real calendar date
  - autoRenewal: strictly boolean

All violations are collected; validation never stops at the first one and
never raises.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping

from app.domain.subscription import (
    BillingCycle, SubscriptionStatus, PaymentMethod,
    SERVICE_NAME_MAX_LENGTH, PLAN_TYPE_MAX_LENGTH, CATEGORY_MAX_LENGTH, MAX_COST,
    enum_values, parse_enum,
)
from app.utils.validation import parse_amount, parse_calendar_date

REQUIRED_ON_CREATE = ("serviceName", "planType", "cost", "billingCycle", "nextBillingDate")

# wire name -> (storage attribute, label used in messages, max length)
_TEXT_FIELDS = (
    ("serviceName", "service_name", "Service name", SERVICE_NAME_MAX_LENGTH),
    ("planType", "plan_type", "Plan type", PLAN_TYPE_MAX_LENGTH),
    ("category", "category", "Category", CATEGORY_MAX_LENGTH),
)

# wire name -> (storage attribute, label, enum)
_ENUM_FIELDS = (
    ("billingCycle", "billing_cycle", "Billing cycle", BillingCycle),
    ("status", "status", "Status", SubscriptionStatus),
    ("paymentMethod", "payment_method", "Payment method", PaymentMethod),
)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    # Storage attribute name -> cleaned value; only fields that passed
    sanitized: dict[str, Any] = field(default_factory=dict)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def validate_subscription_input(data: Mapping[str, Any], is_update: bool = False) -> ValidationResult:
    """
    Validate a create/update payload (camelCase wire keys).

    Returns:
        ValidationResult with every violation in ``errors`` and the cleaned
        values of the valid fields in ``sanitized``
    """
    errors: list[str] = []
    sanitized: dict[str, Any] = {}

    # A key sent as null is present: on update it fails the type check below.
    missing: set[str] = set()
    if not is_update:
        for name in REQUIRED_ON_CREATE:
            if _is_blank(data.get(name)):
                errors.append(f"{name} is required")
                missing.add(name)

    def present(wire: str) -> bool:
        return wire in data and wire not in missing

    for wire, attr, label, max_length in _TEXT_FIELDS:
        if not present(wire):
            continue
        value = data[wire]
        if not isinstance(value, str):
            errors.append(f"{label} must be a string")
            continue
        value = value.strip()
        if len(value) < 1:
            errors.append(f"{label} cannot be empty")
        elif len(value) > max_length:
            errors.append(f"{label} must not exceed {max_length} characters")
        else:
            sanitized[attr] = value

    if present("cost"):
        cost = parse_amount(data["cost"])
        if cost is None or cost < 0:
            errors.append("Cost must be a non-negative number")
        elif cost > MAX_COST:
            errors.append("Cost must not exceed 999,999.99")
        else:
            sanitized["cost"] = cost

    for wire, attr, label, enum_cls in _ENUM_FIELDS:
        if not present(wire):
            continue
        member = parse_enum(enum_cls, data[wire]) if isinstance(data[wire], str) else None
        if member is None:
            errors.append(f"{label} must be one of: {', '.join(enum_values(enum_cls))}")
        else:
            sanitized[attr] = member.value

    if present("nextBillingDate"):
        next_date = parse_calendar_date(data["nextBillingDate"])
        if next_date is None:
            errors.append("Next billing date must be a valid date")
        else:
            sanitized["next_billing_date"] = next_date

    if present("autoRenewal"):
        if not isinstance(data["autoRenewal"], bool):
            errors.append("Auto renewal must be a boolean value")
        else:
            sanitized["auto_renewal"] = data["autoRenewal"]

    return ValidationResult(is_valid=not errors, errors=errors, sanitized=sanitized)
