"""
Coupon validation and discount calculation.

Only one coupon applies to an order; applying another code replaces it.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from errors import CouponInvalid
from pricing import HUNDRED, ZERO, to_money
from schemas import Coupon, CouponResult

logger = logging.getLogger(__name__)

INACTIVE = "inactive"
NOT_YET_VALID = "not-yet-valid"
EXPIRED = "expired"
BELOW_MINIMUM_ORDER = "below-minimum-order"
USAGE_LIMIT_EXCEEDED = "usage-limit-exceeded"
PER_USER_LIMIT_EXCEEDED = "per-user-limit-exceeded"
NOT_FOUND = "not-found"


def _aware(value: datetime) -> datetime:
    # Naive timestamps from the admin form are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def rejection_reason(coupon: Coupon, subtotal: Decimal, now: datetime, user_usage_count: int = 0) -> Optional[str]:
    """First failed rule in precedence order, or None when the coupon applies."""
    now = _aware(now)
    if not coupon.is_active:
        return INACTIVE
    if coupon.valid_from is not None and now < _aware(coupon.valid_from):
        return NOT_YET_VALID
    if coupon.valid_until is not None and now > _aware(coupon.valid_until):
        return EXPIRED
    if coupon.min_order is not None and subtotal < coupon.min_order:
        return BELOW_MINIMUM_ORDER
    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        return USAGE_LIMIT_EXCEEDED
    if coupon.per_user_usage_limit is not None and user_usage_count >= coupon.per_user_usage_limit:
        return PER_USER_LIMIT_EXCEEDED
    return None


def discount_for(coupon: Coupon, subtotal: Decimal) -> Decimal:
    if coupon.type == "FIXED":
        discount = min(coupon.value, subtotal)
    else:
        discount = subtotal * coupon.value / HUNDRED
        if coupon.max_discount is not None:
            discount = min(discount, coupon.max_discount)
    return to_money(max(ZERO, min(discount, subtotal)))


def evaluate(coupon: Coupon, subtotal, now: datetime, user_usage_count: int = 0) -> CouponResult:
    subtotal = to_money(subtotal)
    reason = rejection_reason(coupon, subtotal, now, user_usage_count)
    if reason is not None:
        logger.info("Coupon %s rejected: %s", coupon.code, reason)
        return CouponResult(valid=False, code=coupon.code, reason=reason)
    return CouponResult(valid=True, code=coupon.code, discount=discount_for(coupon, subtotal))


def find_coupon(code: str, coupons: Iterable[Coupon]) -> Coupon:
    wanted = (code or "").strip().upper()
    for coupon in coupons:
        if coupon.code == wanted:
            return coupon
    raise CouponInvalid(NOT_FOUND, f"Coupon {wanted or '(empty)'} does not exist")

