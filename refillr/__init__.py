# refillr/__init__.py
"""LPG refill marketplace: order lifecycle and rider dispatch"""

__version__ = "0.1.0"
