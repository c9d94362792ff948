"""
Pricing Schemas for Studio Sara

Each Pydantic model is a plain value object handed to (or returned by) the
pricing engine. Catalog data arrives from the product/fabric collaborators,
coupon and gateway configuration from the admin collaborators.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Optional, Literal

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

ProductType = Literal["PLAIN", "DESIGNED", "DIGITAL", "CUSTOM"]
SlabDiscountType = Literal["FIXED_AMOUNT", "PERCENTAGE"]
CouponType = Literal["PERCENTAGE", "FIXED"]
Gateway = Literal["COD", "PARTIAL_COD", "RAZORPAY", "STRIPE"]

# Catalog ids are numeric in the admin but string keys in selections
Id = Annotated[str, BeforeValidator(str)]


# ----------------------------
# Catalog
# ----------------------------

class VariantOption(BaseModel):
    id: Id
    value: str = Field(..., description="Display value, e.g. 90x90 cm")
    price_modifier: Decimal = Field(Decimal("0"), description="Signed amount added per unit when selected")


class Variant(BaseModel):
    id: Id
    name: str = Field(..., description="Attribute name, e.g. Size")
    unit: Optional[str] = None
    options: List[VariantOption] = Field(default_factory=list)


class PricingSlab(BaseModel):
    min_quantity: int = Field(..., ge=1)
    max_quantity: Optional[int] = Field(None, description="None means unbounded")
    discount_type: SlabDiscountType = "FIXED_AMOUNT"
    discount_value: Decimal = Field(Decimal("0"), ge=0)
    price_per_meter: Optional[Decimal] = Field(None, ge=0, description="Legacy absolute price, read only when discount_value is 0")
    display_order: int = 0

    @model_validator(mode="after")
    def check_range(self):
        if self.max_quantity is not None and self.max_quantity < self.min_quantity:
            raise ValueError("max_quantity must not be below min_quantity")
        if self.discount_type == "PERCENTAGE" and self.discount_value > 100:
            raise ValueError("percentage discount must be between 0 and 100")
        return self


class Product(BaseModel):
    id: Id
    name: Optional[str] = None
    type: ProductType
    base_price: Optional[Decimal] = Field(None, ge=0, description="PLAIN / DIGITAL price per unit")
    design_price: Optional[Decimal] = Field(None, ge=0, description="DESIGNED / CUSTOM print price per unit")
    variants: List[Variant] = Field(default_factory=list)
    pricing_slabs: List[PricingSlab] = Field(default_factory=list)
    unit_label: str = Field("per meter", description="Unit the quantity is counted in")
    gst_rate: Decimal = Field(Decimal("0"), ge=0, le=100, description="GST percentage")


class FabricSelection(BaseModel):
    fabric_id: Id
    price_per_unit: Decimal = Field(..., ge=0, description="Fabric base price plus its own variant modifiers")
    selected_variants: Dict[Id, Id] = Field(default_factory=dict)


class ShippingSlab(BaseModel):
    min_quantity: int = Field(..., ge=1)
    max_quantity: Optional[int] = None
    shipping_price: Decimal = Field(..., ge=0)


# ----------------------------
# Line items & totals
# ----------------------------

class LineBreakdown(BaseModel):
    base_component: Decimal = Decimal("0")
    design_component: Decimal = Decimal("0")
    fabric_base_component: Decimal = Decimal("0")
    fabric_component: Decimal = Decimal("0")
    variant_component: Decimal = Decimal("0")
    slab: Optional[PricingSlab] = None


class LineItem(BaseModel):
    product_id: str
    product_type: ProductType
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    unit_label: str = "per meter"
    gst_rate: Decimal = Decimal("0")
    fabric_id: Optional[str] = None
    selected_variants: Dict[Id, Id] = Field(default_factory=dict)
    breakdown: LineBreakdown


class OrderTotals(BaseModel):
    subtotal: Decimal
    discount: Decimal
    gst: Decimal
    shipping: Decimal
    cod_charge: Decimal
    grand_total: Decimal
    coupon_code: Optional[str] = None


# ----------------------------
# Coupons
# ----------------------------

class Coupon(BaseModel):
    code: str
    type: CouponType
    value: Decimal = Field(..., ge=0)
    min_order: Optional[Decimal] = Field(None, ge=0)
    max_discount: Optional[Decimal] = Field(None, ge=0, description="Cap for PERCENTAGE coupons")
    usage_limit: Optional[int] = Field(None, ge=0)
    used_count: int = Field(0, ge=0, description="Global redemptions so far")
    per_user_usage_limit: Optional[int] = Field(None, ge=0)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def check_percentage(self):
        if self.type == "PERCENTAGE" and self.value > 100:
            raise ValueError("percentage coupon value must be between 0 and 100")
        return self


class CouponResult(BaseModel):
    valid: bool
    code: Optional[str] = None
    discount: Optional[Decimal] = None
    reason: Optional[str] = None


# ----------------------------
# Payments
# ----------------------------

class GatewayConfig(BaseModel):
    cod_enabled: bool = False
    partial_cod_enabled: bool = False
    razorpay_enabled: bool = False
    stripe_enabled: bool = False
    partial_cod_advance_percentage: Optional[Decimal] = Field(None, ge=10, le=90)
    cod_charge: Decimal = Field(Decimal("0"), ge=0)

    @model_validator(mode="after")
    def check_partial_cod(self):
        if not self.partial_cod_enabled:
            return self
        if self.cod_enabled:
            raise ValueError("COD and partial COD cannot both be enabled")
        if not (self.razorpay_enabled or self.stripe_enabled):
            raise ValueError("partial COD needs Razorpay or Stripe enabled for the advance")
        if self.partial_cod_advance_percentage is None:
            raise ValueError("partial COD needs an advance percentage between 10 and 90")
        return self


class GatewayResolution(BaseModel):
    offered: List[Gateway]
    default: Gateway


class PartialCodSplit(BaseModel):
    percentage: Decimal
    advance: Decimal
    balance: Decimal
