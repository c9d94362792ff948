from decimal import Decimal

import pytest

from schemas import FabricSelection, GatewayConfig, PricingSlab, Product, Variant, VariantOption


@pytest.fixture
def size_variant():
    return Variant(
        id="10",
        name="Size",
        options=[
            VariantOption(id="100", value="45x45 cm", price_modifier=0),
            VariantOption(id="101", value="90x90 cm", price_modifier=20),
        ],
    )


@pytest.fixture
def designed_product(size_variant):
    return Product(
        id=1,
        name="Rose Garden Print",
        type="DESIGNED",
        design_price=100,
        variants=[size_variant],
        pricing_slabs=[PricingSlab(min_quantity=10, discount_type="FIXED_AMOUNT", discount_value=5)],
    )


@pytest.fixture
def plain_product():
    return Product(
        id=2,
        name="Cotton Cambric",
        type="PLAIN",
        base_price=Decimal("50"),
        gst_rate=5,
        variants=[
            Variant(
                id="20",
                name="Width",
                options=[
                    VariantOption(id="200", value="44 inch", price_modifier=0),
                    VariantOption(id="201", value="58 inch", price_modifier=Decimal("12.50")),
                ],
            )
        ],
    )


@pytest.fixture
def digital_product():
    return Product(id=3, name="Seamless Pattern Pack", type="DIGITAL", base_price=499, unit_label="per license")


@pytest.fixture
def fabric():
    return FabricSelection(fabric_id=2, price_per_unit=50)


@pytest.fixture
def cod_config():
    return GatewayConfig(cod_enabled=True, razorpay_enabled=True, stripe_enabled=True, cod_charge=49)


@pytest.fixture
def partial_cod_config():
    return GatewayConfig(
        partial_cod_enabled=True,
        razorpay_enabled=True,
        stripe_enabled=True,
        partial_cod_advance_percentage=30,
        cod_charge=49,
    )
