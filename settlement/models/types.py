"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for bets, wins, cash events and balances
# Precision: 20 digits total, 2 after decimal point
# Range: up to 999,999,999,999,999,999.99
MoneyType = DECIMAL(20, 2)

# Commission rate percentage type
# Precision: 7 digits total, 4 after decimal point
# Suitable for: commission rates (e.g., 1.2500%, 10.0000%)
# Range: 0.0000 to 999.9999
RatePercentType = DECIMAL(7, 4)

# Settlement amount type; commission math is kept unrounded
# Precision: 28 digits total, 10 after decimal point
SettlementAmountType = DECIMAL(28, 10)
