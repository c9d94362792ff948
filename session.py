"""
Checkout state owned by one customer session.

Holds the applied coupon and the selected gateway; both change only through
the methods below.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

import coupons
import gateways
import pricing
from errors import CouponInvalid
from schemas import Coupon, CouponResult, GatewayConfig, GatewayResolution, LineItem, OrderTotals, ShippingSlab

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    country: str
    has_digital_products: bool = False
    coupon: Optional[Coupon] = None
    gateway: Optional[str] = None

    @classmethod
    def for_lines(cls, country: str, lines: Iterable[LineItem], gateway: Optional[str] = None) -> "CheckoutSession":
        has_digital = any(line.product_type == "DIGITAL" for line in lines)
        return cls(country=country, has_digital_products=has_digital, gateway=gateway)

    # ---- coupon ----

    def apply_coupon(self, coupon: Coupon, subtotal, now: datetime, user_usage_count: int = 0) -> CouponResult:
        """Replace the applied coupon. A rejected code leaves the previous one in place."""
        result = coupons.evaluate(coupon, subtotal, now, user_usage_count)
        if not result.valid:
            raise CouponInvalid(result.reason)
        if self.coupon is not None and self.coupon.code != coupon.code:
            logger.info("Coupon %s replaced by %s", self.coupon.code, coupon.code)
        self.coupon = coupon
        return result

    def remove_coupon(self) -> None:
        self.coupon = None

    # ---- gateway ----

    def refresh_gateways(self, config: GatewayConfig, api_gateways: Iterable[str]) -> GatewayResolution:
        resolution = gateways.resolve(
            self.country, self.has_digital_products, config, api_gateways, previous=self.gateway
        )
        self.gateway = resolution.default
        return resolution

    def select_gateway(self, gateway: str, resolution: GatewayResolution) -> str:
        self.gateway = gateways.ensure_offered(gateway, resolution)
        return self.gateway

    # ---- totals ----

    def totals(
        self,
        lines: Sequence[LineItem],
        config: Optional[GatewayConfig] = None,
        shipping_slabs: Sequence[ShippingSlab] = (),
        now: Optional[datetime] = None,
        user_usage_count: int = 0,
    ) -> OrderTotals:
        """Order totals with the applied coupon re-checked against the current subtotal."""
        subtotal = pricing.subtotal_of(lines)
        discount = pricing.ZERO
        code = None
        if self.coupon is not None:
            now = now or datetime.now(timezone.utc)
            result = coupons.evaluate(self.coupon, subtotal, now, user_usage_count)
            if result.valid:
                discount, code = result.discount, self.coupon.code
        cod_charge = gateways.cod_charge_for(self.gateway, config) if config is not None else pricing.ZERO
        return pricing.order_totals(lines, discount, shipping_slabs, cod_charge, coupon_code=code)
