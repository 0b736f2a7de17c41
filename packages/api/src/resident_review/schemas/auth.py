# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from pydantic import BaseModel, ConfigDict, Field

from ..enums import UserRole


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request.

    ``access_token`` is the operator's own bearer token. It is forwarded to
    the backend on every collaborator call so the backend can authorize each
    mutation itself.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    email: str
    name: str
    access_token: str | None = Field(default=None, repr=False, exclude=True)


class TokenPayload(BaseModel):
    """Decoded JWT token claims from Keycloak."""

    sub: str
    email: str = ""
    preferred_username: str = ""
    name: str = ""
    realm_access: dict = Field(default_factory=dict)
