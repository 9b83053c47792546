"""Google OAuth payloads."""

from pydantic import BaseModel, model_validator


class GoogleToken(BaseModel):
    """Token endpoint response."""

    access_token: str
    expires_in: int | None = None
    token_type: str = "Bearer"
    scope: str = ""
    id_token: str | None = None


class GoogleProfile(BaseModel):
    """Userinfo endpoint response.

    Google returns either `sub` or `id` for the account id depending on the endpoint version.
    """

    id: str | None = None
    sub: str | None = None
    email: str
    verified_email: bool = False
    name: str
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None

    @model_validator(mode="after")
    def _require_account_id(self) -> "GoogleProfile":
        if not (self.sub or self.id):
            raise ValueError("Either 'sub' or 'id' must be present")
        return self

    @property
    def google_id(self) -> str:
        return self.sub or self.id or ""
