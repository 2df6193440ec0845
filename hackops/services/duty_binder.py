"""
Duty binder — a volunteer's association with one logistics secret code.

The binding lives in whatever mapping the caller hands in (the volunteer's
session over HTTP), so it lasts exactly as long as that session. Binding
never touches the ledger: an unknown code only shows up as ``NotFound`` on
the first assignment.
"""

from typing import MutableMapping, Optional

from hackops.errors import PreconditionFailed, ValidationFailed
from hackops.services.logistics_ledger import LogisticsLedger, RedemptionResult

SESSION_KEY = "duty_code"


class DutyBinder:
    def __init__(self, ledger: LogisticsLedger, store: Optional[MutableMapping] = None):
        self._ledger = ledger
        self._store = store if store is not None else {}

    @property
    def bound_code(self) -> Optional[str]:
        return self._store.get(SESSION_KEY)

    @property
    def is_bound(self) -> bool:
        return bool(self.bound_code)

    def bind(self, secret_code: str) -> None:
        """Bind to ``secret_code``, replacing any previous binding."""
        code = (secret_code or "").strip()
        if not code:
            raise ValidationFailed("empty_duty_code", "Duty code is required.")
        self._store[SESSION_KEY] = code

    def unbind(self) -> None:
        self._store.pop(SESSION_KEY, None)

    async def assign_to_participant(self, email: str) -> RedemptionResult:
        code = self.bound_code
        if not code:
            raise PreconditionFailed("no_duty_bound", "Bind a duty code before assigning logistics.")
        return await self._ledger.redeem(code, email)
