"""Amount filter - drops transfers below a minimum quantity."""

from __future__ import annotations

import logging
from typing import Any

log = logging.getLogger(__name__)


def parse_quantity(quantity: str) -> tuple[float | None, str | None]:
    """Split an asset string like ``"10.00000000 WAX"`` into (amount, symbol).

    The string is split on single spaces, so ``"10WAX"`` has no symbol and
    ``"10.0  WAX"`` has an empty one. An amount that is not a number is None.
    """
    parts = quantity.split(" ")
    symbol = parts[1] if len(parts) > 1 else None
    try:
        amount: float | None = float(parts[0])
    except ValueError:
        amount = None
    return amount, symbol


class AmountFilter:
    """Applies the minimum-amount rule the history API cannot express.

    Rules, when ``min_amount > 0``:
    1. Actions without a ``data.quantity`` string pass (non-transfer actions)
    2. A missing symbol, or one other than ``token_symbol``, is dropped
    3. An amount below ``min_amount`` is dropped
    4. A non-numeric amount with the right symbol passes

    With ``min_amount <= 0`` everything passes.
    """

    def __init__(self, min_amount: float = 0, token_symbol: str = "WAX") -> None:
        self._min_amount = float(min_amount or 0)
        self._token_symbol = token_symbol

    @property
    def min_amount(self) -> float:
        return self._min_amount

    @property
    def token_symbol(self) -> str:
        return self._token_symbol

    @property
    def active(self) -> bool:
        return self._min_amount > 0

    def accepts(self, action: dict[str, Any]) -> bool:
        if not self.active:
            return True

        if not isinstance(action, dict):
            return True
        act = action.get("act")
        data = act.get("data") if isinstance(act, dict) else None
        quantity = data.get("quantity") if isinstance(data, dict) else None
        if not isinstance(quantity, str) or not quantity:
            return True

        amount, symbol = parse_quantity(quantity)
        if symbol != self._token_symbol:
            return False
        if amount is None:
            log.debug("Non-numeric quantity %r, passing through", quantity)
            return True
        return amount >= self._min_amount

    def apply(self, actions: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not self.active:
            return list(actions)
        kept = [a for a in actions if self.accepts(a)]
        if len(kept) != len(actions):
            log.debug(
                "Amount filter kept %d of %d actions (min %s %s)",
                len(kept), len(actions), self._min_amount, self._token_symbol,
            )
        return kept
