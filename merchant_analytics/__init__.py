"""
Merchant Analytics API

Dashboard charts for the platform admin and sales reports for merchants.
"""

__version__ = "1.0.0"
