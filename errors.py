"""
Errors raised by the pricing engine.

All of them are recoverable: the caller decides whether to block an action,
show a message or retry with different inputs.
"""
from typing import Optional


class PricingError(Exception):
    code = "pricing-error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.code
        super().__init__(self.message)


class MissingFabricSelection(PricingError):
    code = "missing-fabric-selection"


class InvalidQuantity(PricingError):
    code = "invalid-quantity"


class InvalidSlabSet(PricingError):
    code = "invalid-slab-set"


class CouponInvalid(PricingError):
    code = "coupon-invalid"

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or f"Coupon rejected: {reason}")


class NoGatewayAvailable(PricingError):
    code = "no-gateway-available"


class GatewayNotOffered(PricingError):
    code = "gateway-not-offered"
