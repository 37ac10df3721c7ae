"""
Conditional responses for listing endpoints.

A successful listing body is hashed into an ETag. When the request's
If-None-Match names the same validator the response short-circuits to a 304
with an empty body and the unchanged ETag.

Only handlers that have already built a successful payload call into this
module, so error responses never carry an ETag. With ETAGS_ENABLED off it is
a passthrough: no hash is computed and no conditional check is made.

Usage:
    @router.get("/api/users")
    async def list_users(request: Request):
        payload = ...
        return conditional_cache.respond(payload, request)
"""

import hashlib
from dataclasses import dataclass
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.responses import Response

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CachedBody:
    validator: str | None
    status: int
    body: bytes


def content_validator(body: bytes) -> str:
    """Fixed-length fingerprint of a serialized body."""
    return hashlib.md5(body, usedforsecurity=False).hexdigest()


def _normalize_tag(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    return tag.strip('"')


def validator_matches(if_none_match: str | None, validator: str) -> bool:
    """True when the If-None-Match header names `validator` (or is `*`)."""
    if not if_none_match:
        return False
    tags = [_normalize_tag(tag) for tag in if_none_match.split(",")]
    return "*" in tags or validator in tags


class ConditionalCache:
    """ETag wrapper for deterministic listing payloads."""

    def __init__(self, enabled: bool | None = None) -> None:
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        if self._enabled is not None:
            return self._enabled
        return settings.ETAGS_ENABLED

    def wrap(self, body: bytes, if_none_match: str | None = None) -> CachedBody:
        if not self.enabled:
            return CachedBody(validator=None, status=200, body=body)

        validator = content_validator(body)
        if validator_matches(if_none_match, validator):
            return CachedBody(validator=validator, status=304, body=b"")
        return CachedBody(validator=validator, status=200, body=body)

    def respond(self, payload: Any, request: Request) -> Response:
        """Render `payload` as JSON, attaching an ETag or answering 304."""
        rendered = JSONResponse(content=jsonable_encoder(payload))
        cached = self.wrap(rendered.body, request.headers.get("if-none-match"))

        if cached.validator is None:
            return rendered

        etag = f'"{cached.validator}"'
        if cached.status == 304:
            logger.debug("Conditional request matched", path=request.url.path)
            return Response(status_code=304, headers={"ETag": etag})

        rendered.headers["ETag"] = etag
        return rendered


conditional_cache = ConditionalCache()
