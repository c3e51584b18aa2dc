"""Pusher Channels presence transport over the signed REST API."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from hostkit.core.errors import TransportError
from hostkit.transport.base import PresenceMember, PresenceTransport
from hostkit.transport.config import PusherConfig

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger("hostkit.transport")


def sign_request(
    secret: str,
    method: str,
    path: str,
    params: dict[str, str],
) -> str:
    """Return the ``auth_signature`` for a Pusher REST request.

    The string to sign is ``METHOD\\nPATH\\nQUERY`` where QUERY holds every
    parameter except the signature itself, keys lowercased and sorted.
    """
    query = "&".join(f"{k.lower()}={params[k]}" for k in sorted(params, key=str.lower))
    to_sign = f"{method.upper()}\n{path}\n{query}"
    return hmac.new(secret.encode(), to_sign.encode(), hashlib.sha256).hexdigest()


class PusherPresenceTransport(PresenceTransport):
    """Broadcasts through Pusher and reads presence members from it.

    Membership changes arrive as Pusher webhooks; feed them to
    ``RoomHub.handle_webhook``.
    """

    def __init__(self, config: PusherConfig) -> None:
        try:
            import httpx as _httpx
        except ImportError as exc:
            raise ImportError(
                "httpx is required for PusherPresenceTransport. "
                "Install it with: pip install hostkit[pusher]"
            ) from exc
        self._config = config
        self._httpx = _httpx
        self._client: httpx.AsyncClient = _httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
        )

    async def broadcast(self, channel: str, event_name: str, payload: dict[str, Any]) -> None:
        body = json.dumps(
            {"name": event_name, "channels": [channel], "data": json.dumps(payload)},
            separators=(",", ":"),
        )
        await self._request("POST", f"/apps/{self._config.app_id}/events", body=body)
        logger.debug("Triggered %s on %s", event_name, channel, extra={"channel": channel})

    async def members(self, channel: str) -> list[PresenceMember]:
        path = f"/apps/{self._config.app_id}/channels/{quote(channel, safe='')}/users"
        data = await self._request("GET", path)
        members: list[PresenceMember] = []
        for user in data.get("users", []):
            user_id = user.get("id")
            if not user_id:
                continue
            members.append(
                PresenceMember(user_id=str(user_id), user_info=user.get("user_info") or {})
            )
        return members

    async def is_occupied(self, channel: str) -> bool:
        path = f"/apps/{self._config.app_id}/channels/{quote(channel, safe='')}"
        data = await self._request("GET", path)
        return bool(data.get("occupied", False))

    def _signed_params(self, method: str, path: str, body: str | None) -> dict[str, str]:
        params: dict[str, str] = {
            "auth_key": self._config.key,
            "auth_timestamp": str(int(time.time())),
            "auth_version": "1.0",
        }
        if body is not None:
            params["body_md5"] = hashlib.md5(body.encode()).hexdigest()  # noqa: S324  # nosec B324
        params["auth_signature"] = sign_request(
            self._config.secret.get_secret_value(), method, path, params
        )
        return params

    async def _request(self, method: str, path: str, *, body: str | None = None) -> dict[str, Any]:
        params = self._signed_params(method, path, body)
        headers = {"Content-Type": "application/json"} if body is not None else {}
        try:
            resp = await self._client.request(
                method, path, params=params, content=body, headers=headers
            )
            resp.raise_for_status()
        except self._httpx.TimeoutException as exc:
            raise TransportError(f"Pusher {method} {path} timed out") from exc
        except self._httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Pusher {method} {path} failed: http_{exc.response.status_code}"
            ) from exc
        except self._httpx.HTTPError as exc:
            raise TransportError(f"Pusher {method} {path} failed: {exc}") from exc

        if not resp.content:
            return {}
        data: dict[str, Any] = resp.json()
        return data

    async def close(self) -> None:
        await self._client.aclose()
