"""
HackOps – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them
through a single ``from hackops.models import *`` import.
"""

from hackops.models.hackathon import Hackathon, HackathonRegistration  # noqa: F401
from hackops.models.team import Team                                   # noqa: F401
from hackops.models.team_membership import TeamMembership, Role        # noqa: F401
from hackops.models.logistics import LogisticsItem, Redemption          # noqa: F401
from hackops.models.revoked_token import RevokedToken                   # noqa: F401
