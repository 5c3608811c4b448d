from __future__ import annotations

import logging
from typing import Any, Optional

import aioboto3
from botocore.exceptions import ClientError
from tqdm import tqdm

from cdtool.services.config import OssConfig

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most this many keys per call.
_DELETE_BATCH_SIZE = 1000


class OssServiceError(RuntimeError):
    pass


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class OssService:
    """Bucket-level operations against the S3-compatible object-storage API."""

    def __init__(self, config: OssConfig, *, session: Optional[aioboto3.Session] = None) -> None:
        self._config = config
        self._session = session or aioboto3.Session(
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.access_key_secret,
        )

    @property
    def bucket_name(self) -> str:
        return self._config.bucket_name

    def _client(self) -> Any:
        return self._session.client(
            "s3",
            region_name=self._config.region_name,
            endpoint_url=self._config.endpoint_url,
        )

    async def put_bucket(self) -> None:
        """Create the bucket; a bucket we already own counts as success."""

        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                await s3.create_bucket(Bucket=self._config.bucket_name)
        except ClientError as exc:
            if _error_code(exc) in {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}:
                logger.debug("Bucket %s already exists", self._config.bucket_name)
                return
            logger.exception("OSS put_bucket failed")
            raise OssServiceError(f"Failed to create bucket {self._config.bucket_name}") from exc
        except Exception as exc:
            logger.exception("OSS put_bucket failed")
            raise OssServiceError(f"Failed to create bucket {self._config.bucket_name}") from exc

    async def put_bucket_lifecycle(self, *, rule_id: str, prefix: str, expiration_days: int) -> None:
        rule = {
            "ID": rule_id,
            "Filter": {"Prefix": prefix},
            "Status": "Enabled",
            "Expiration": {"Days": expiration_days},
        }
        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                await s3.put_bucket_lifecycle_configuration(
                    Bucket=self._config.bucket_name,
                    LifecycleConfiguration={"Rules": [rule]},
                )
        except Exception as exc:
            logger.exception("OSS put_bucket_lifecycle failed")
            raise OssServiceError(f"Failed to put lifecycle rule on bucket {self._config.bucket_name}") from exc

    async def delete_bucket_lifecycle(self) -> None:
        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                await s3.delete_bucket_lifecycle(Bucket=self._config.bucket_name)
        except Exception as exc:
            logger.exception("OSS delete_bucket_lifecycle failed")
            raise OssServiceError(f"Failed to delete lifecycle of bucket {self._config.bucket_name}") from exc

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object whose key starts with ``prefix``. Returns the number deleted."""

        if not prefix:
            raise ValueError("'prefix' must be provided")

        deleted = 0
        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                keys: list[str] = []
                continuation: Optional[str] = None
                while True:
                    kwargs: dict[str, Any] = {"Bucket": self._config.bucket_name, "Prefix": prefix}
                    if continuation:
                        kwargs["ContinuationToken"] = continuation
                    response = await s3.list_objects_v2(**kwargs)
                    keys.extend(str(o.get("Key")) for o in response.get("Contents", []))
                    if not response.get("IsTruncated"):
                        break
                    continuation = response.get("NextContinuationToken")

                if not keys:
                    logger.info("No objects under %s/%s", self._config.bucket_name, prefix)
                    return 0

                with tqdm(total=len(keys), desc=f"Deleting {prefix}", unit="object") as progress:
                    for start in range(0, len(keys), _DELETE_BATCH_SIZE):
                        batch = keys[start : start + _DELETE_BATCH_SIZE]
                        await s3.delete_objects(
                            Bucket=self._config.bucket_name,
                            Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                        )
                        deleted += len(batch)
                        progress.update(len(batch))
        except Exception as exc:
            logger.exception("OSS delete_prefix failed")
            raise OssServiceError(f"Failed to delete objects under prefix {prefix!r}") from exc

        return deleted

    async def delete_bucket(self) -> None:
        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                await s3.delete_bucket(Bucket=self._config.bucket_name)
        except Exception as exc:
            logger.exception("OSS delete_bucket failed")
            raise OssServiceError(f"Failed to delete bucket {self._config.bucket_name}") from exc
