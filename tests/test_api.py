from fastapi.testclient import TestClient

from main import app

client = TestClient(app)

DESIGNED = {
    "id": 1,
    "name": "Rose Garden Print",
    "type": "DESIGNED",
    "design_price": 100,
    "gst_rate": 5,
    "variants": [
        {"id": 10, "name": "Size", "options": [{"id": 101, "value": "90x90 cm", "price_modifier": 20}]}
    ],
    "pricing_slabs": [{"min_quantity": 10, "max_quantity": None, "discount_type": "FIXED_AMOUNT", "discount_value": 5}],
}

FABRIC = {"id": 2, "name": "Cotton Cambric", "type": "PLAIN", "base_price": 50}

CONFIG = {
    "cod_enabled": True,
    "partial_cod_enabled": False,
    "razorpay_enabled": True,
    "stripe_enabled": True,
    "cod_charge": 49,
}


def test_root():
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "running"


def test_price_line_with_fabric_product():
    r = client.post("/api/price/line", json={
        "product": DESIGNED,
        "quantity": 10,
        "selections": {"10": "101"},
        "fabric_product": FABRIC,
    })
    assert r.status_code == 200
    body = r.json()
    assert body["unit_price"] == "165.00"
    assert body["line_total"] == "1650.00"
    assert body["breakdown"]["fabric_component"] == "45.00"


def test_price_line_without_fabric_is_rejected():
    r = client.post("/api/price/line", json={"product": DESIGNED, "quantity": 2})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "missing-fabric-selection"


def test_price_line_invalid_quantity():
    r = client.post("/api/price/line", json={"product": FABRIC, "quantity": 0})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "invalid-quantity"


def test_validate_slabs():
    ok = client.post("/api/slabs/validate", json={"slabs": [
        {"min_quantity": 11},
        {"min_quantity": 1, "max_quantity": 10, "discount_value": 2},
    ]})
    assert ok.status_code == 200
    assert [s["min_quantity"] for s in ok.json()["slabs"]] == [1, 11]

    bad = client.post("/api/slabs/validate", json={"slabs": [
        {"min_quantity": 1, "max_quantity": 10},
        {"min_quantity": 5},
    ]})
    assert bad.status_code == 400


def test_validate_coupon():
    coupons = [{"code": "HALF", "type": "PERCENTAGE", "value": 50, "max_discount": 20}]
    r = client.post("/api/coupons/validate", json={"code": "half", "order_total": 1000, "coupons": coupons})
    assert r.status_code == 200
    assert r.json() == {"valid": True, "code": "HALF", "discount": "20.00", "reason": None}


def test_validate_coupon_not_found():
    r = client.post("/api/coupons/validate", json={"code": "MISSING", "order_total": 100})
    assert r.status_code == 404
    assert r.json()["detail"]["reason"] == "not-found"


def test_validate_coupon_rejects_bad_email():
    r = client.post("/api/coupons/validate", json={"code": "X", "order_total": 100, "user_email": "not-an-email"})
    assert r.status_code == 422


def test_payment_methods_with_partial_cod_split():
    config = dict(CONFIG, cod_enabled=False, partial_cod_enabled=True, partial_cod_advance_percentage=25)
    r = client.post("/api/payment-methods", json={
        "country": "IN",
        "config": config,
        "api_gateways": ["RAZORPAY"],
        "order_total": 2000,
    })
    assert r.status_code == 200
    body = r.json()
    assert body["offered"] == ["PARTIAL_COD", "RAZORPAY"]
    assert body["default"] == "RAZORPAY"
    assert body["partial_cod"]["advance"] == "500.00"
    assert body["partial_cod"]["balance"] == "1500.00"


def test_payment_methods_rejects_cod_with_partial_cod():
    config = dict(CONFIG, partial_cod_enabled=True, partial_cod_advance_percentage=25)
    r = client.post("/api/payment-methods", json={"country": "IN", "config": config, "api_gateways": ["RAZORPAY"]})
    assert r.status_code == 422


def test_payment_methods_none_available():
    r = client.post("/api/payment-methods", json={
        "country": "US",
        "has_digital_products": True,
        "config": CONFIG,
        "api_gateways": [],
    })
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "no-gateway-available"


def test_currency_format():
    r = client.post("/api/currency/format", json={
        "amount": 1000,
        "to_currency": "usd",
        "exchange_rates": {"USD": 0.012},
    })
    assert r.status_code == 200
    assert r.json()["formatted"] == "$12.00"
    assert r.json()["symbol"] == "$"


def test_calc_full_checkout():
    r = client.post("/api/calc", json={
        "items": [
            {"product": DESIGNED, "quantity": 10, "selections": {"10": "101"}, "fabric": {"fabric_id": 2, "price_per_unit": 50}},
        ],
        "country": "IN",
        "coupon_code": "welcome10",
        "coupons": [{"code": "WELCOME10", "type": "PERCENTAGE", "value": 10}],
        "config": CONFIG,
        "api_gateways": ["RAZORPAY", "STRIPE"],
        "shipping_slabs": [{"min_quantity": 1, "max_quantity": 20, "shipping_price": 100}],
        "display_currency": "INR",
    })
    assert r.status_code == 200
    body = r.json()
    totals = body["totals"]
    assert totals["subtotal"] == "1650.00"
    assert totals["discount"] == "165.00"
    assert totals["gst"] == "74.25"
    assert totals["shipping"] == "100.00"
    assert totals["cod_charge"] == "49.00"
    assert totals["grand_total"] == "1708.25"
    assert totals["coupon_code"] == "WELCOME10"
    assert body["payment"]["default"] == "COD"
    assert body["display"]["grand_total"] == "1,708.25 ₹"


def test_calc_keeps_selected_gateway_and_reports_bad_coupon():
    r = client.post("/api/calc", json={
        "items": [{"product": FABRIC, "quantity": 2}],
        "country": "IN",
        "coupon_code": "BIGSPENDER",
        "coupons": [{"code": "BIGSPENDER", "type": "FIXED", "value": 500, "min_order": 5000}],
        "gateway": "STRIPE",
        "config": CONFIG,
        "api_gateways": ["STRIPE"],
    })
    assert r.status_code == 200
    body = r.json()
    assert body["coupon"]["valid"] is False
    assert body["coupon"]["reason"] == "below-minimum-order"
    assert body["totals"]["discount"] == "0.00"
    assert body["totals"]["cod_charge"] == "0.00"
    assert body["payment"]["default"] == "STRIPE"


def test_calc_empty_cart():
    r = client.post("/api/calc", json={"items": []})
    assert r.status_code == 400
