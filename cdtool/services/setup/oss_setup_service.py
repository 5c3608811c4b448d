from __future__ import annotations

import logging
from typing import Callable, Mapping

from cdtool.models.oss import BucketResult
from cdtool.services.config import OssConfig, auto_bucket_name, is_auto
from cdtool.services.oss_service import OssService

logger = logging.getLogger(__name__)

OssServiceFactory = Callable[[OssConfig], OssService]


class OssSetupService:
    """Provisioning helper for the object-storage bucket.

    Bring-up resolves the bucket (creating the auto-named one when asked) and puts a
    lifecycle rule expiring ``logs/`` after 30 days. Tear-down empties ``logs/``,
    drops the rule, and deletes the bucket only for deep removal of an auto bucket.
    A user-supplied bucket is never deleted.
    """

    LOGS_PREFIX = "logs/"
    LIFECYCLE_RULE_ID = "logs_rule"
    LIFECYCLE_EXPIRATION_DAYS = 30

    def __init__(self, env_config: Mapping[str, str], *, oss_factory: OssServiceFactory = OssService) -> None:
        self._env_config = env_config
        self._oss_factory = oss_factory

    def _auto_bucket_name(self) -> str:
        account_id = self._env_config.get("ACCOUNTID")
        region_name = self._env_config.get("REGION")
        if not account_id or not region_name:
            raise ValueError("ACCOUNTID and REGION are required to derive the bucket name")
        return auto_bucket_name(account_id=account_id, region_name=region_name)

    async def setup_bucket(self) -> BucketResult:
        configured = self._env_config.get("OSS_BUCKET", "")
        auto_created = is_auto(configured)
        bucket_name = self._auto_bucket_name() if auto_created else configured.strip()
        if not bucket_name:
            raise ValueError("Missing required config value: OSS_BUCKET")

        oss = self._oss_factory(OssConfig.from_env_config(self._env_config, bucket_name=bucket_name))

        if auto_created:
            logger.info("Put bucket %s start...", bucket_name)
            await oss.put_bucket()

        await oss.put_bucket_lifecycle(
            rule_id=self.LIFECYCLE_RULE_ID,
            prefix=self.LOGS_PREFIX,
            expiration_days=self.LIFECYCLE_EXPIRATION_DAYS,
        )
        logger.info("Bucket %s ready", bucket_name)
        return BucketResult(bucket_name=bucket_name, auto_created=auto_created)

    async def remove_bucket(self, *, deep: bool) -> bool:
        """Tear down bucket contents and rule. Returns True if the bucket itself was deleted."""

        configured = self._env_config.get("OSS_BUCKET", "")
        bucket_name = self._auto_bucket_name() if is_auto(configured) else configured.strip()
        if not bucket_name:
            raise ValueError("Missing required config value: OSS_BUCKET")

        config = OssConfig.from_env_config(self._env_config, bucket_name=bucket_name)

        oss = self._oss_factory(config)
        deleted = await oss.delete_prefix(self.LOGS_PREFIX)
        logger.info("Deleted %d object(s) under %s", deleted, self.LOGS_PREFIX)
        await oss.delete_bucket_lifecycle()

        if deep and config.is_auto_bucket:
            logger.info("Remove bucket %s start...", config.bucket_name)
            await oss.delete_bucket()
            logger.info("Remove bucket %s success", config.bucket_name)
            return True

        return False
