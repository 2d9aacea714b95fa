# refillr/utils/pricing.py
from decimal import Decimal, InvalidOperation

class PricingNotConfigured(Exception):
    """No positive unit price exists for a brand/size pair"""

    def __init__(self, brand: str, size: str):
        self.brand = brand
        self.size = size
        super().__init__(f"No price configured for {pricing_key(brand, size)}")

def pricing_key(brand: str, size: str) -> str:
    return f"{brand}-{size}"

def resolve_unit_price(merchant, brand: str, size: str) -> Decimal:
    """Look up the merchant's unit price; raise PricingNotConfigured when missing"""
    raw = (merchant.pricing or {}).get(pricing_key(brand, size))
    if raw is None:
        raise PricingNotConfigured(brand, size)
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        raise PricingNotConfigured(brand, size)
    if not price.is_finite() or price <= 0:
        raise PricingNotConfigured(brand, size)
    return price

def compute_total(unit_price: Decimal, quantity: int) -> Decimal:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError("quantity must be a positive integer")
    return unit_price * quantity
