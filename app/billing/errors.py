from __future__ import annotations


class SettlementError(Exception):
    code = "SETTLEMENT_ERROR"
    fatal = False


class NoTierMatched(SettlementError):
    code = "NO_TIER_MATCHED"


class NotSettleable(SettlementError):
    code = "NOT_SETTLEABLE"


class BrokenInvariant(SettlementError):
    """A completed-or-later order without actual liters. Not recoverable by the caller."""

    code = "BROKEN_INVARIANT"
    fatal = True
