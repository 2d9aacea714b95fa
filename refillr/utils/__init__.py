# refillr/utils/__init__.py
