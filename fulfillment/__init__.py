"""
CloudRetail fulfillment: stock ledger, order workflow and payment simulation
"""

__version__ = "1.0.0"
