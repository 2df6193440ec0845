"""
HackOps – process-wide service instances and their FastAPI dependencies.

The registry and the ledger each own their keyed locks, so one instance per
process is what makes the per-record serialization hold.
"""

from fastapi import Depends, Request

from hackops.database import async_session
from hackops.services.duty_binder import DutyBinder
from hackops.services.logistics_ledger import LogisticsLedger
from hackops.services.principal import PrincipalResolver
from hackops.services.team_registry import TeamRegistry

principal_resolver = PrincipalResolver(async_session)
team_registry = TeamRegistry(async_session)
logistics_ledger = LogisticsLedger(async_session)


def get_principal_resolver() -> PrincipalResolver:
    return principal_resolver


def get_team_registry() -> TeamRegistry:
    return team_registry


def get_logistics_ledger() -> LogisticsLedger:
    return logistics_ledger


def get_duty_binder(
    request: Request,
    ledger: LogisticsLedger = Depends(get_logistics_ledger),
) -> DutyBinder:
    """A binder over the volunteer's signed session cookie."""
    return DutyBinder(ledger, request.session)
