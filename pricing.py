"""
Line and order pricing for catalog products.

One composer serves the product page, the custom-product page, the cart and
checkout so that every surface charges the same amount for the same
configuration. Nothing in here performs I/O; all catalog data is passed in.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Mapping, Optional, Sequence

from errors import InvalidQuantity, InvalidSlabSet, MissingFabricSelection
from schemas import (
    FabricSelection,
    LineBreakdown,
    LineItem,
    OrderTotals,
    PricingSlab,
    Product,
    ShippingSlab,
    Variant,
    VariantOption,
)
from settings import MONEY_PLACES

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal(1).scaleb(-MONEY_PLACES)

FABRIC_PRICED_TYPES = ("DESIGNED", "CUSTOM")


def to_money(value) -> Decimal:
    """Quantize to the store's minor unit, rounding half up."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def check_quantity(quantity: int) -> None:
    if quantity is None or quantity <= 0:
        raise InvalidQuantity(f"Quantity must be at least 1, got {quantity}")


# ------------------------- Variant modifiers -------------------------

def find_option(variant: Variant, selected: str) -> Optional[VariantOption]:
    # Cart rows store either the option id or its display value
    for option in variant.options:
        if option.id == selected:
            return option
    for option in variant.options:
        if option.value == selected:
            return option
    return None


def resolve_modifier(variants: Sequence[Variant], selections: Optional[Mapping[str, str]]) -> Decimal:
    """Sum the price modifiers of the selected option of every variant.

    Variants without a selection add nothing. A selection that no longer
    matches any option (the product was edited after it was made) is ignored.
    """
    total = ZERO
    if not selections:
        return total
    for variant in variants:
        selected = selections.get(variant.id)
        if selected is None:
            continue
        option = find_option(variant, str(selected))
        if option is None:
            logger.warning("Ignoring stale option %r for variant %s", selected, variant.id)
            continue
        total += option.price_modifier
    return total


def fabric_price_per_unit(fabric: Product, selections: Optional[Mapping[str, str]] = None) -> Decimal:
    """Price of one unit of a plain fabric including its own variant modifiers."""
    base = fabric.base_price or ZERO
    return max(ZERO, base + resolve_modifier(fabric.variants, selections))


def fabric_selection_for(fabric: Product, selections: Optional[Mapping[str, str]] = None) -> FabricSelection:
    return FabricSelection(
        fabric_id=fabric.id,
        price_per_unit=fabric_price_per_unit(fabric, selections),
        selected_variants=dict(selections or {}),
    )


# ------------------------- Quantity slabs -------------------------

def sort_slabs(slabs: Iterable[PricingSlab]) -> List[PricingSlab]:
    # Stable: slabs sharing a min_quantity keep their given order
    return sorted(slabs, key=lambda s: s.min_quantity)


def _in_range(quantity: int, minimum: int, maximum: Optional[int]) -> bool:
    return quantity >= minimum and (maximum is None or quantity <= maximum)


def match_slab(quantity: int, slabs: Iterable[PricingSlab]) -> Optional[PricingSlab]:
    for slab in sort_slabs(slabs):
        if _in_range(quantity, slab.min_quantity, slab.max_quantity):
            return slab
    return None


def apply_slab(base_unit_price: Decimal, slab: Optional[PricingSlab]) -> Decimal:
    if slab is None:
        return base_unit_price
    if slab.discount_value == 0 and slab.price_per_meter is not None:
        # Deprecated encoding: the slab carries an absolute price instead of a discount
        logger.warning("Using legacy absolute slab price %s for range %s-%s",
                       slab.price_per_meter, slab.min_quantity, slab.max_quantity)
        return slab.price_per_meter
    if slab.discount_type == "FIXED_AMOUNT":
        return max(ZERO, base_unit_price - slab.discount_value)
    return max(ZERO, base_unit_price * (1 - slab.discount_value / HUNDRED))


def effective_unit_price(quantity: int, base_unit_price, slabs: Sequence[PricingSlab]) -> Decimal:
    """Per-unit price after the discount of the slab covering `quantity`.

    Slabs are scanned in ascending `min_quantity` order and the first one whose
    range holds the quantity wins. No slabs, or no matching slab, leaves the
    price unchanged.
    """
    check_quantity(quantity)
    base = base_unit_price if isinstance(base_unit_price, Decimal) else Decimal(str(base_unit_price))
    if not slabs:
        return base
    slab = match_slab(quantity, slabs)
    logger.debug("Quantity %s matched slab %s", quantity, slab)
    return apply_slab(base, slab)


def validate_slabs(slabs: Sequence[PricingSlab]) -> List[PricingSlab]:
    """Reject slab sets whose ranges overlap. Returns the slabs sorted."""
    ordered = sort_slabs(slabs)
    for current, following in zip(ordered, ordered[1:]):
        if current.max_quantity is None or current.max_quantity >= following.min_quantity:
            upper = "∞" if current.max_quantity is None else current.max_quantity
            raise InvalidSlabSet(
                f"Slab {current.min_quantity}-{upper} overlaps slab starting at {following.min_quantity}"
            )
    return ordered


# ------------------------- Line composition -------------------------

def compose_line(
    product: Product,
    quantity: int,
    selections: Optional[Mapping[str, str]] = None,
    fabric: Optional[FabricSelection] = None,
) -> LineItem:
    """Price one configured cart line.

    PLAIN and DIGITAL lines cost base price plus variant modifiers per unit.
    DESIGNED and CUSTOM lines add the design price to the slab-adjusted fabric
    price; their quantity is the fabric length in the product's unit.
    """
    check_quantity(quantity)
    selections = dict(selections or {})
    variant_component = resolve_modifier(product.variants, selections)

    if product.type in FABRIC_PRICED_TYPES:
        if fabric is None:
            raise MissingFabricSelection(f"Product {product.id} needs a fabric before it can be priced")
        design_component = product.design_price or ZERO
        slab = match_slab(quantity, product.pricing_slabs) if product.pricing_slabs else None
        fabric_component = apply_slab(fabric.price_per_unit, slab)
        unit_price = design_component + fabric_component + variant_component
        breakdown = LineBreakdown(
            design_component=to_money(design_component),
            fabric_base_component=to_money(fabric.price_per_unit),
            fabric_component=to_money(fabric_component),
            variant_component=to_money(variant_component),
            slab=slab,
        )
    else:
        base_component = product.base_price or ZERO
        unit_price = base_component + variant_component
        breakdown = LineBreakdown(
            base_component=to_money(base_component),
            variant_component=to_money(variant_component),
        )

    unit_price = to_money(max(ZERO, unit_price))
    return LineItem(
        product_id=product.id,
        product_type=product.type,
        quantity=quantity,
        unit_price=unit_price,
        line_total=to_money(unit_price * quantity),
        unit_label=product.unit_label,
        gst_rate=product.gst_rate,
        fabric_id=fabric.fabric_id if fabric is not None else None,
        selected_variants=selections,
        breakdown=breakdown,
    )


# ------------------------- Order totals -------------------------

def shipping_quantity(lines: Iterable[LineItem]) -> int:
    return sum(line.quantity for line in lines if line.product_type != "DIGITAL")


def shipping_for_quantity(quantity: int, slabs: Sequence[ShippingSlab]) -> Decimal:
    if quantity <= 0:
        return ZERO
    for slab in sorted(slabs, key=lambda s: s.min_quantity):
        if _in_range(quantity, slab.min_quantity, slab.max_quantity):
            return to_money(slab.shipping_price)
    return ZERO


def subtotal_of(lines: Iterable[LineItem]) -> Decimal:
    return to_money(sum((line.line_total for line in lines), ZERO))


def gst_for(lines: Sequence[LineItem], subtotal: Decimal, discount: Decimal) -> Decimal:
    """GST on each line's share of the post-coupon subtotal."""
    if subtotal <= 0:
        return ZERO
    remaining = (subtotal - discount) / subtotal
    gst = ZERO
    for line in lines:
        gst += line.line_total * remaining * line.gst_rate / HUNDRED
    return to_money(gst)


def order_totals(
    lines: Sequence[LineItem],
    discount=ZERO,
    shipping_slabs: Sequence[ShippingSlab] = (),
    cod_charge=ZERO,
    coupon_code: Optional[str] = None,
) -> OrderTotals:
    subtotal = subtotal_of(lines)
    discount = min(to_money(discount), subtotal)
    gst = gst_for(lines, subtotal, discount)
    shipping = shipping_for_quantity(shipping_quantity(lines), shipping_slabs)
    cod_charge = to_money(cod_charge)
    return OrderTotals(
        subtotal=subtotal,
        discount=discount,
        gst=gst,
        shipping=shipping,
        cod_charge=cod_charge,
        grand_total=subtotal - discount + gst + shipping + cod_charge,
        coupon_code=coupon_code,
    )

