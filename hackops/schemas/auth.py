"""Auth Pydantic schemas — issued tokens."""

from hackops.schemas.base import CamelModel


class TokenOut(CamelModel):
    email: str
    auth_token: str
    token_type: str = "bearer"
    expires_in_minutes: int
