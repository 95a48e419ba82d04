"""Culina - Monthly generation quota."""

from culina.quota.ledger import QuotaLedger

__all__ = ["QuotaLedger"]
