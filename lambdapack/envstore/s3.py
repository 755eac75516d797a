"""S3-backed environment store."""

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lambdapack.envstore.base import DEFAULT_KEY_PREFIX, EnvironmentStore, env_object_key
from lambdapack.errors import EnvironmentFetchFailed

logger = logging.getLogger(__name__)


class S3EnvironmentStore(EnvironmentStore):
    """Reads environment files with S3 `GetObject`.

    A pre-built client can be injected; otherwise one is created for
    `region` from the ambient AWS credentials.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        client: Any = None,
    ):
        self.key_prefix = key_prefix
        self._client = client if client is not None else boto3.client("s3", region_name=region)

    def fetch_object(self, bucket: str, project_name: str, stage: str) -> bytes:
        key = env_object_key(project_name, stage, self.key_prefix)
        logger.debug("Fetching environment file s3://%s/%s", bucket, key)

        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "")
            if error_code in ("NoSuchKey", "404", "NoSuchBucket"):
                message = f"Environment file s3://{bucket}/{key} not found"
            else:
                message = f"Failed to fetch s3://{bucket}/{key}: {exc}"
            raise EnvironmentFetchFailed(message, detail=f"{bucket}/{key}") from exc
        except BotoCoreError as exc:
            raise EnvironmentFetchFailed(
                f"Failed to fetch s3://{bucket}/{key}: {exc}",
                detail=f"{bucket}/{key}",
            ) from exc
