"""
Master of Coin

Normalizes a multi-sheet monthly finance workbook into canonical
transactions and computes budget totals, a lender ledger with residuals
carried across months, and pillar rollups.
"""

__version__ = "2.0.0"
