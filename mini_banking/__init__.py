"""
Mini Banking

Named accounts with exact cent arithmetic, overflow and overdraft checks,
and all-or-nothing transfers between accounts.
"""

__version__ = "1.0.0"
