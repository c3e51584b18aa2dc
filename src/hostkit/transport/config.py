"""Pusher transport configuration."""

from __future__ import annotations

from pydantic import BaseModel, SecretStr, field_validator


class PusherConfig(BaseModel):
    """Credentials and endpoint for a Pusher Channels app."""

    app_id: str
    key: str
    secret: SecretStr
    cluster: str = "mt1"
    use_tls: bool = True
    timeout: float = 10.0
    host: str | None = None

    @field_validator("app_id", "key", "cluster")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @property
    def base_url(self) -> str:
        scheme = "https" if self.use_tls else "http"
        host = self.host or f"api-{self.cluster}.pusher.com"
        return f"{scheme}://{host}"
