# tests/test_pricing.py
from decimal import Decimal
import pytest
from refillr.utils.pricing import (
    PricingNotConfigured,
    compute_total,
    pricing_key,
    resolve_unit_price,
)
from .fakes import InMemoryDatabase

@pytest.fixture
def merchant():
    return InMemoryDatabase().add_merchant(pricing={
        "Gasul-11kg": Decimal("800"),
        "Petron-11kg": Decimal("0"),
        "Solane-11kg": Decimal("-5"),
    })

def test_pricing_key():
    assert pricing_key("Gasul", "2.7kg") == "Gasul-2.7kg"

def test_resolves_configured_price(merchant):
    assert resolve_unit_price(merchant, "Gasul", "11kg") == Decimal("800")

@pytest.mark.parametrize("brand,size", [
    ("Gasul", "22kg"),   # missing
    ("Petron", "11kg"),  # zero
    ("Solane", "11kg"),  # negative
])
def test_unusable_prices_are_not_configured(merchant, brand, size):
    with pytest.raises(PricingNotConfigured):
        resolve_unit_price(merchant, brand, size)

def test_compute_total():
    assert compute_total(Decimal("800"), 2) == Decimal("1600")

@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
def test_compute_total_rejects_bad_quantity(quantity):
    with pytest.raises(ValueError):
        compute_total(Decimal("800"), quantity)

def test_fractional_prices_are_kept_exact():
    merchant = InMemoryDatabase().add_merchant(pricing={"Gasul-11kg": Decimal("333.335")})

    unit = resolve_unit_price(merchant, "Gasul", "11kg")

    assert compute_total(unit, 3) == Decimal("1000.005")
