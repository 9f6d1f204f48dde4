"""
Subscription list query planning.

Turns untrusted query-string parameters into a bounded, owner-scoped query
description. Planning never fails: malformed paging or sort input degrades
to the defaults.

Paging:
  page  - leading integer, floored at 1, default 1
  limit - leading integer, clamped to [1, 100], default 10
          (0 and unparsable values fall back to the default)
Sorting:
  sortBy    - serviceName | cost | nextBillingDate | createdAt | updatedAt
              (default nextBillingDate)
  sortOrder - asc | desc (default asc)
Filtering (all ANDed, always ANDed with user_id = requester):
  status, category, billingCycle - exact match
  search - case-insensitive substring of serviceName OR planType OR category
"""
from dataclasses import dataclass
from typing import Any, Mapping

from app.domain.subscription import SortField, SortOrder, parse_enum
from app.utils.validation import parse_leading_int

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_SORT_FIELD = SortField.NEXT_BILLING_DATE
DEFAULT_SORT_ORDER = SortOrder.ASC

# Record attributes searched by the free-text filter
SEARCH_FIELDS = ("service_name", "plan_type", "category")


@dataclass(frozen=True)
class SubscriptionFilter:
    """Conjunction of predicates; ``user_id`` is never optional."""
    user_id: int
    status: str | None = None
    category: str | None = None
    billing_cycle: str | None = None
    search: str | None = None

    def exact_matches(self) -> dict[str, str]:
        """Storage attribute -> required value for the exact-match predicates."""
        pairs = {
            "status": self.status,
            "category": self.category,
            "billing_cycle": self.billing_cycle,
        }
        return {attr: value for attr, value in pairs.items() if value is not None}

    def matches(self, record) -> bool:
        """Evaluate the filter against one record (attribute access)."""
        if getattr(record, "user_id", None) != self.user_id:
            return False
        for attr, value in self.exact_matches().items():
            if getattr(record, attr, None) != value:
                return False
        if self.search is not None:
            needle = self.search.lower()
            return any(
                needle in (getattr(record, attr, None) or "").lower()
                for attr in SEARCH_FIELDS
            )
        return True


@dataclass(frozen=True)
class SubscriptionQuery:
    page: int
    limit: int
    sort_by: SortField
    sort_order: SortOrder
    where: SubscriptionFilter

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self, total_count: int) -> dict:
        """Pagination block of a list response."""
        total_pages = -(-total_count // self.limit)
        return {
            "currentPage": self.page,
            "totalPages": total_pages,
            "totalItems": total_count,
            "itemsPerPage": self.limit,
            "hasNextPage": self.page < total_pages,
            "hasPrevPage": self.page > 1,
        }


def _text_param(value) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def plan_subscription_query(raw: Mapping[str, Any], user_id: int) -> SubscriptionQuery:
    """
    Build the query for a user's subscription list from raw query params.

    Args:
        raw: request query parameters (string values)
        user_id: authenticated requester; every plan is scoped to it
    """
    page = parse_leading_int(raw.get("page")) or DEFAULT_PAGE
    page = max(1, page)

    limit = parse_leading_int(raw.get("limit")) or DEFAULT_LIMIT
    limit = min(MAX_LIMIT, max(1, limit))

    sort_by = parse_enum(SortField, raw.get("sortBy")) or DEFAULT_SORT_FIELD
    sort_order = parse_enum(SortOrder, raw.get("sortOrder")) or DEFAULT_SORT_ORDER

    where = SubscriptionFilter(
        user_id=user_id,
        status=_text_param(raw.get("status")),
        category=_text_param(raw.get("category")),
        billing_cycle=_text_param(raw.get("billingCycle")),
        search=_text_param(raw.get("search")),
    )

    return SubscriptionQuery(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        where=where,
    )
