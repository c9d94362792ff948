"""
Payment gateway eligibility.

Several gateways can be offered at once; the rules for each are evaluated
independently from the country, the cart's product types and the merchant's
payment configuration.
"""
import logging
from decimal import Decimal
from typing import Iterable, Optional

from errors import GatewayNotOffered, NoGatewayAvailable
from pricing import HUNDRED, ZERO, to_money
from schemas import GatewayConfig, GatewayResolution, PartialCodSplit
from settings import HOME_COUNTRY

logger = logging.getLogger(__name__)

COD = "COD"
PARTIAL_COD = "PARTIAL_COD"
RAZORPAY = "RAZORPAY"
STRIPE = "STRIPE"

# Pay on delivery first for physical goods, then Stripe, then Razorpay
DEFAULT_PRECEDENCE = (COD, STRIPE, RAZORPAY, PARTIAL_COD)

COUNTRY_ALIASES = {"INDIA": "IN"}


def normalize_country(country: Optional[str]) -> str:
    code = (country or "").strip().upper()
    return COUNTRY_ALIASES.get(code, code)


def is_domestic(country: Optional[str]) -> bool:
    return normalize_country(country) == HOME_COUNTRY


def resolve(
    country: str,
    has_digital_products: bool,
    config: GatewayConfig,
    api_gateways: Iterable[str],
    previous: Optional[str] = None,
) -> GatewayResolution:
    """Offered gateways and the default selection for a cart.

    `api_gateways` lists the processors the payment-methods service reports
    for the country. A `previous` selection that is still offered is kept.
    """
    available = {g.strip().upper() for g in api_gateways or ()}
    domestic = is_domestic(country)

    offered = []
    if not has_digital_products:
        if config.cod_enabled:
            offered.append(COD)
        if domestic and config.partial_cod_enabled and (config.razorpay_enabled or config.stripe_enabled):
            offered.append(PARTIAL_COD)
    if domestic and config.razorpay_enabled and RAZORPAY in available:
        offered.append(RAZORPAY)
    if config.stripe_enabled and STRIPE in available:
        offered.append(STRIPE)

    if not offered:
        raise NoGatewayAvailable(f"No payment method available for {normalize_country(country) or 'unknown country'}")

    if previous is not None and previous.upper() in offered:
        default = previous.upper()
    else:
        default = next(g for g in DEFAULT_PRECEDENCE if g in offered)
    logger.debug("Gateways for %s (digital=%s): %s, default %s", country, has_digital_products, offered, default)
    return GatewayResolution(offered=offered, default=default)


def ensure_offered(gateway: str, resolution: GatewayResolution) -> str:
    gateway = (gateway or "").strip().upper()
    if gateway not in resolution.offered:
        raise GatewayNotOffered(f"{gateway or 'Empty gateway'} is not offered for this order")
    return gateway


def cod_charge_for(gateway: Optional[str], config: GatewayConfig) -> Decimal:
    if gateway in (COD, PARTIAL_COD):
        return to_money(config.cod_charge)
    return ZERO


def partial_cod_split(grand_total, config: GatewayConfig) -> PartialCodSplit:
    """Amount paid online up front and the balance collected on delivery."""
    if not config.partial_cod_enabled:
        raise GatewayNotOffered("Partial COD is not enabled")
    total = to_money(grand_total)
    percentage = config.partial_cod_advance_percentage
    advance = to_money(total * percentage / HUNDRED)
    return PartialCodSplit(percentage=percentage, advance=advance, balance=total - advance)
