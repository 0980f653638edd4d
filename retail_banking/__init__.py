"""
Retail Banking API

User registration, bank accounts and deposit / withdrawal transactions
with exact 2-decimal-place money and atomic balance updates.
"""

__version__ = "1.0.0"
