import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, EmailStr, Field

import coupons
import currency
import gateways
import pricing
from errors import CouponInvalid, InvalidSlabSet, NoGatewayAvailable, PricingError
from schemas import (
    Coupon,
    CouponResult,
    FabricSelection,
    GatewayConfig,
    GatewayResolution,
    Id,
    LineItem,
    OrderTotals,
    PartialCodSplit,
    PricingSlab,
    Product,
    ShippingSlab,
)
from session import CheckoutSession
from settings import CORS_ORIGINS, LOG_LEVEL, PORT, STORE_CURRENCY

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("studiosara.pricing")

app = FastAPI(title="Studio Sara Pricing API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def to_http(e: PricingError) -> HTTPException:
    if isinstance(e, CouponInvalid) and e.reason == coupons.NOT_FOUND:
        return HTTPException(status_code=404, detail={"code": e.code, "reason": e.reason, "message": e.message})
    detail = {"code": e.code, "message": e.message}
    if isinstance(e, CouponInvalid):
        detail["reason"] = e.reason
    return HTTPException(status_code=400, detail=detail)


@app.get("/")
def read_root():
    return {"brand": "Studio Sara", "service": "pricing", "currency": STORE_CURRENCY, "status": "running"}


# ------------------------- Line pricing -------------------------
class LineRequest(BaseModel):
    product: Product
    quantity: int = Field(1, description="Units, meters for fabric-priced products")
    selections: Dict[Id, Id] = Field(default_factory=dict, description="variant id -> option id")
    fabric: Optional[FabricSelection] = None
    fabric_product: Optional[Product] = Field(None, description="Plain fabric to derive the fabric selection from")
    fabric_selections: Dict[Id, Id] = Field(default_factory=dict)


def price_line(req: LineRequest) -> LineItem:
    fabric = req.fabric
    if fabric is None and req.fabric_product is not None:
        fabric = pricing.fabric_selection_for(req.fabric_product, req.fabric_selections)
    return pricing.compose_line(req.product, req.quantity, req.selections, fabric)


@app.post("/api/price/line", response_model=LineItem)
def compose_line(payload: LineRequest):
    try:
        return price_line(payload)
    except PricingError as e:
        raise to_http(e)


class SlabValidateRequest(BaseModel):
    slabs: List[PricingSlab]


@app.post("/api/slabs/validate")
def validate_slabs(payload: SlabValidateRequest):
    try:
        ordered = pricing.validate_slabs(payload.slabs)
    except InvalidSlabSet as e:
        raise to_http(e)
    return {"valid": True, "slabs": ordered}


# ------------------------- Coupons -------------------------
class CouponValidateRequest(BaseModel):
    code: str
    order_total: Decimal = Field(..., ge=0)
    user_email: Optional[EmailStr] = None
    user_usage_count: int = Field(0, ge=0)
    coupons: List[Coupon] = Field(default_factory=list, description="Coupons known to the store")


@app.post("/api/coupons/validate", response_model=CouponResult)
def validate_coupon(payload: CouponValidateRequest):
    now = datetime.now(timezone.utc)
    try:
        coupon = coupons.find_coupon(payload.code, payload.coupons)
    except CouponInvalid as e:
        raise to_http(e)
    result = coupons.evaluate(coupon, payload.order_total, now, payload.user_usage_count)
    logger.info("Coupon %s checked (signed in: %s): %s", coupon.code, payload.user_email is not None, result.reason or "ok")
    return result


# ------------------------- Payments -------------------------
class PaymentMethodsRequest(BaseModel):
    country: str = "IN"
    has_digital_products: bool = False
    config: GatewayConfig
    api_gateways: List[str] = Field(default_factory=list)
    previous: Optional[str] = None
    order_total: Optional[Decimal] = Field(None, ge=0, description="Needed for the partial COD split")


class PaymentMethodsResponse(BaseModel):
    offered: List[str]
    default: str
    partial_cod: Optional[PartialCodSplit] = None


@app.post("/api/payment-methods", response_model=PaymentMethodsResponse)
def payment_methods(payload: PaymentMethodsRequest):
    try:
        resolution = gateways.resolve(
            payload.country, payload.has_digital_products, payload.config, payload.api_gateways, payload.previous
        )
    except NoGatewayAvailable as e:
        raise to_http(e)
    split = None
    if gateways.PARTIAL_COD in resolution.offered and payload.order_total is not None:
        split = gateways.partial_cod_split(payload.order_total, payload.config)
    return PaymentMethodsResponse(offered=resolution.offered, default=resolution.default, partial_cod=split)


# ------------------------- Currency -------------------------
class CurrencyFormatRequest(BaseModel):
    amount: Decimal
    to_currency: str
    from_currency: str = STORE_CURRENCY
    exchange_rates: Dict[str, Decimal] = Field(default_factory=dict)
    multipliers: Dict[str, Decimal] = Field(default_factory=dict)


@app.post("/api/currency/format")
def format_currency(payload: CurrencyFormatRequest):
    converted = currency.convert(
        payload.amount, payload.to_currency, payload.exchange_rates, payload.multipliers, payload.from_currency
    )
    return {
        "amount": converted,
        "currency": payload.to_currency.upper(),
        "symbol": currency.get_currency_symbol(payload.to_currency),
        "name": currency.get_currency_name(payload.to_currency),
        "formatted": currency.format_price(converted, payload.to_currency),
    }


# ------------------------- Cart / Checkout Calc -------------------------
class CalcRequest(BaseModel):
    items: List[LineRequest]
    country: str = "IN"
    coupon_code: Optional[str] = None
    coupons: List[Coupon] = Field(default_factory=list)
    user_usage_count: int = Field(0, ge=0)
    gateway: Optional[str] = Field(None, description="Gateway currently selected by the customer")
    config: Optional[GatewayConfig] = None
    api_gateways: List[str] = Field(default_factory=list)
    shipping_slabs: List[ShippingSlab] = Field(default_factory=list)
    display_currency: Optional[str] = None
    exchange_rates: Dict[str, Decimal] = Field(default_factory=dict)
    multipliers: Dict[str, Decimal] = Field(default_factory=dict)


class CalcResponse(BaseModel):
    items: List[LineItem]
    totals: OrderTotals
    coupon: Optional[CouponResult] = None
    payment: Optional[GatewayResolution] = None
    partial_cod: Optional[PartialCodSplit] = None
    display: Optional[Dict[str, str]] = None


@app.post("/api/calc", response_model=CalcResponse)
def calculate_order(payload: CalcRequest):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Cart is empty")
    now = datetime.now(timezone.utc)
    try:
        lines = [price_line(item) for item in payload.items]
        checkout = CheckoutSession.for_lines(payload.country, lines, gateway=payload.gateway)

        coupon_result = None
        if payload.coupon_code:
            subtotal = pricing.subtotal_of(lines)
            try:
                coupon = coupons.find_coupon(payload.coupon_code, payload.coupons)
                coupon_result = checkout.apply_coupon(coupon, subtotal, now, payload.user_usage_count)
            except CouponInvalid as e:
                coupon_result = CouponResult(valid=False, code=payload.coupon_code.strip().upper(), reason=e.reason)

        resolution = None
        if payload.config is not None:
            resolution = checkout.refresh_gateways(payload.config, payload.api_gateways)

        totals = checkout.totals(lines, payload.config, payload.shipping_slabs, now, payload.user_usage_count)
    except PricingError as e:
        raise to_http(e)

    split = None
    if payload.config is not None and checkout.gateway == gateways.PARTIAL_COD:
        split = gateways.partial_cod_split(totals.grand_total, payload.config)

    display = None
    if payload.display_currency:
        display = {
            field: currency.format_amount(
                getattr(totals, field), payload.display_currency, payload.exchange_rates, payload.multipliers
            )
            for field in ("subtotal", "discount", "gst", "shipping", "cod_charge", "grand_total")
        }

    return CalcResponse(
        items=lines,
        totals=totals,
        coupon=coupon_result,
        payment=resolution,
        partial_cod=split,
        display=display,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
