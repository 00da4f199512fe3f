"""
Column types shared by the ledger models.
"""

from sqlalchemy import DECIMAL

# Amounts, balances and earnings: 18 digits, 8 fractional
# (commissions are truncated to the same 8 digits before they are written)
MoneyType = DECIMAL(18, 8)
