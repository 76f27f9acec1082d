# finbro/budget.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterator, Optional, Tuple

from finbro.core.models import check_amount
from finbro.utils import check_month

logger = logging.getLogger(__name__)


class GoalStore:
    """Per-month target amounts keyed by ``(month, year)``.

    Used for both monthly budgets and savings goals. Unset months return
    ``None`` so a target of 0 stays distinguishable from "no target".
    """

    def __init__(self, name: str = "goal") -> None:
        self.name = name
        self._amounts: Dict[Tuple[int, int], Decimal] = {}

    def set(self, month: int, year: int, amount) -> Decimal:
        key = check_month(month, year)
        try:
            value = check_amount(amount)
        except ValueError as exc:
            raise ValueError(f"Invalid {self.name} amount: {amount!r}") from exc
        self._amounts[key] = value
        logger.info("Set %s for %02d/%d to %.2f", self.name, key[0], key[1], value)
        return value

    def get(self, month: int, year: int) -> Optional[Decimal]:
        return self._amounts.get(check_month(month, year))

    def clear(self) -> None:
        self._amounts.clear()

    def items(self) -> Iterator[Tuple[Tuple[int, int], Decimal]]:
        return iter(sorted(self._amounts.items(), key=lambda kv: (kv[0][1], kv[0][0])))

    def __len__(self) -> int:
        return len(self._amounts)
