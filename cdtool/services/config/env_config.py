from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


AUTO = "auto"
DEFAULT_DB_PREFIX = "cd"
DEFAULT_SERVICE_NAME = "serverless-cd"

# Keys that only steer synthesis and never reach the environment file.
SYNTHESIS_ONLY_PROPS = ("dbPrefix", "serviceName")

OTS_DEFAULT_CONFIG: dict[str, str] = {
    "OTS_USER_TABLE_NAME": "user",
    "OTS_USER_INDEX_NAME": "user_index",
    "OTS_APP_TABLE_NAME": "application",
    "OTS_APP_INDEX_NAME": "application_index",
    "OTS_TASK_TABLE_NAME": "task",
    "OTS_TASK_INDEX_NAME": "task_index",
    "OTS_TOKEN_TABLE_NAME": "token",
    "OTS_TOKEN_INDEX_NAME": "token_index",
}

OTHER_DEFAULT_CONFIG: dict[str, str] = {
    "REGION": "cn-hangzhou",
    "OSS_BUCKET": AUTO,
    "DOMAIN": AUTO,
    "OTS_INSTANCE_NAME": "serverless-cd",
}


def is_auto(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == AUTO


@dataclass(frozen=True)
class Credentials:
    """Opaque account/key/secret triple used to sign every provider call."""

    account_id: str
    access_key_id: str
    access_key_secret: str

    @staticmethod
    def from_props(props: Mapping[str, Any]) -> Optional["Credentials"]:
        account_id = props.get("ACCOUNTID")
        access_key_id = props.get("ACCESS_KEY_ID")
        access_key_secret = props.get("ACCESS_KEY_SECRET")
        if account_id and access_key_id and access_key_secret:
            return Credentials(
                account_id=str(account_id),
                access_key_id=str(access_key_id),
                access_key_secret=str(access_key_secret),
            )
        return None

    @staticmethod
    def from_env() -> "Credentials":
        account_id = os.getenv("ALIBABA_CLOUD_ACCOUNT_ID")
        access_key_id = os.getenv("ALIBABA_CLOUD_ACCESS_KEY_ID")
        access_key_secret = os.getenv("ALIBABA_CLOUD_ACCESS_KEY_SECRET")

        missing = [
            name
            for name, value in (
                ("ALIBABA_CLOUD_ACCOUNT_ID", account_id),
                ("ALIBABA_CLOUD_ACCESS_KEY_ID", access_key_id),
                ("ALIBABA_CLOUD_ACCESS_KEY_SECRET", access_key_secret),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing required environment variable(s): {', '.join(missing)}")

        return Credentials(
            account_id=str(account_id),
            access_key_id=str(access_key_id),
            access_key_secret=str(access_key_secret),
        )

    @staticmethod
    def resolve(props: Mapping[str, Any]) -> "Credentials":
        """Credentials declared in props win; otherwise read them from the process env."""

        return Credentials.from_props(props) or Credentials.from_env()

    def as_env(self) -> dict[str, str]:
        return {
            "ACCOUNTID": self.account_id,
            "ACCESS_KEY_ID": self.access_key_id,
            "ACCESS_KEY_SECRET": self.access_key_secret,
        }


def synthesize_env_config(
    props: Mapping[str, Any],
    credentials: Credentials,
    *,
    db_defaults: Mapping[str, str] = OTS_DEFAULT_CONFIG,
    other_defaults: Mapping[str, str] = OTHER_DEFAULT_CONFIG,
) -> dict[str, str]:
    """Merge user props, fixed defaults and live credentials into one flat config.

    Precedence, lowest to highest:
    1) ``other_defaults``
    2) database names (user value or default), each rendered as ``{dbPrefix}_{name}``
    3) remaining user props
    4) the credential triple

    Only keys present in ``db_defaults`` receive the prefix. ``dbPrefix`` and
    ``serviceName`` are consumed here and never appear in the result. The inputs
    are not mutated.
    """

    db_prefix = str(props.get("dbPrefix") or DEFAULT_DB_PREFIX)
    user_props = {k: v for k, v in props.items() if k not in SYNTHESIS_ONLY_PROPS}

    config: dict[str, str] = dict(other_defaults)

    for key, default in db_defaults.items():
        value = user_props.get(key)
        name = default if value is None or value == "" else str(value)
        config[key] = f"{db_prefix}_{name}"

    for key, value in user_props.items():
        if key in db_defaults:
            continue
        config[key] = "" if value is None else str(value)

    config.update(credentials.as_env())

    logger.debug("Synthesized config keys: %s", sorted(config))
    return config


def service_name_from_props(props: Mapping[str, Any]) -> str:
    return str(props.get("serviceName") or DEFAULT_SERVICE_NAME)
