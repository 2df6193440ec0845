"""Shared Pydantic bases — camelCase on the wire, snake_case in Python."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

# Row ids are 64-bit signed integers in every supported backend.
RecordId = Annotated[int, Field(ge=1, le=2**63 - 1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthenticatedRequest(CamelModel):
    """Every authenticated call carries the caller's email and auth token.

    A missing token is left for the principal resolver to reject, so it
    surfaces as ``Unauthenticated`` rather than a request validation error.
    """
    email: EmailStr
    auth_token: str = ""


class HackathonScopedRequest(AuthenticatedRequest):
    hackathon_id: RecordId


class MessageOut(CamelModel):
    message: str
