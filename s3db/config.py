"""Client configuration helpers (explicit arguments first, env fallback)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from s3db.errors import ConfigurationError

ENV_REGION = "S3_DB_REGION"
ENV_ACCESS_KEY_ID = "S3_DB_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY = "S3_DB_SECRET_ACCESS_KEY"
ENV_ENDPOINT_URL = "S3_DB_ENDPOINT_URL"
ENV_SESSION_TOKEN = "S3_DB_SESSION_TOKEN"


@dataclass(frozen=True)
class S3dbConfig:
    region: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    endpoint_url: str | None = None
    session_token: str | None = field(default=None, repr=False)

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``boto3.client("s3", ...)``."""

        kwargs: dict[str, Any] = {
            "region_name": self.region,
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
        }
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self.session_token:
            kwargs["aws_session_token"] = self.session_token
        return kwargs


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pick(explicit: str | None, env: Mapping[str, str], name: str) -> str | None:
    return _clean(explicit) or _clean(env.get(name))


def get_s3db_config(
    *,
    region: str | None = None,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
    endpoint_url: str | None = None,
    session_token: str | None = None,
    env: Mapping[str, str] | None = None,
) -> S3dbConfig:
    """Resolve the storage client configuration.

    Each setting comes from its explicit argument when given, otherwise from the
    matching environment variable:

    - ``S3_DB_REGION``
    - ``S3_DB_ACCESS_KEY_ID``
    - ``S3_DB_SECRET_ACCESS_KEY``
    - ``S3_DB_ENDPOINT_URL`` (optional, for S3-compatible services)
    - ``S3_DB_SESSION_TOKEN`` (optional)

    Blank values count as missing. Nothing is read from the network.
    """

    env = dict(os.environ) if env is None else env

    resolved_region = _pick(region, env, ENV_REGION)
    resolved_access_key = _pick(access_key_id, env, ENV_ACCESS_KEY_ID)
    resolved_secret_key = _pick(secret_access_key, env, ENV_SECRET_ACCESS_KEY)

    missing = [
        name
        for name, value in (
            (f"region ({ENV_REGION})", resolved_region),
            (f"access_key_id ({ENV_ACCESS_KEY_ID})", resolved_access_key),
            (f"secret_access_key ({ENV_SECRET_ACCESS_KEY})", resolved_secret_key),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            "Missing S3 credentials: " + ", ".join(missing) + " must be provided"
        )

    return S3dbConfig(
        region=str(resolved_region),
        access_key_id=str(resolved_access_key),
        secret_access_key=str(resolved_secret_key),
        endpoint_url=_pick(endpoint_url, env, ENV_ENDPOINT_URL),
        session_token=_pick(session_token, env, ENV_SESSION_TOKEN),
    )
