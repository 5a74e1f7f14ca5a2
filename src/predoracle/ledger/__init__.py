"""Bond ledger boundary: the oracle reads balances and requests reserve/release, never moves value itself."""

from predoracle.ledger.base import BondLedger, Reservation, reservation_key

__all__ = ["BondLedger", "Reservation", "reservation_key"]
