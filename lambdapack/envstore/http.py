"""Object-storage REST environment store.

Fetches environment files from a Supabase-style storage endpoint:

    GET {storage_url}/storage/v1/object/{bucket}/{key}

authenticated with the service role key. The key is server-side only and
is never written to logs.
"""

import logging
from typing import Optional

import httpx

from lambdapack.envstore.base import DEFAULT_KEY_PREFIX, EnvironmentStore, env_object_key
from lambdapack.errors import EnvironmentFetchFailed

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpEnvironmentStore(EnvironmentStore):
    def __init__(
        self,
        storage_url: str,
        service_key: str,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.storage_url = storage_url.rstrip("/")
        self.key_prefix = key_prefix
        self._service_key = service_key
        self._timeout = timeout
        self._transport = transport

    def fetch_object(self, bucket: str, project_name: str, stage: str) -> bytes:
        key = env_object_key(project_name, stage, self.key_prefix)
        headers = {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
        }

        try:
            with httpx.Client(
                base_url=self.storage_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = client.get(f"/storage/v1/object/{bucket}/{key}", headers=headers)
        except httpx.HTTPError as exc:
            raise EnvironmentFetchFailed(
                f"Failed to fetch environment file {bucket}/{key}: {exc}",
                detail=f"{bucket}/{key}",
            ) from exc

        # Supabase answers 400 for a missing object in some versions
        if response.status_code in (400, 404):
            raise EnvironmentFetchFailed(
                f"Environment file {bucket}/{key} not found",
                detail=f"{bucket}/{key}",
            )
        if response.status_code >= 300:
            raise EnvironmentFetchFailed(
                f"Failed to fetch environment file {bucket}/{key}: "
                f"HTTP {response.status_code}",
                detail=f"{bucket}/{key}",
            )

        logger.debug("Fetched %d bytes from %s/%s", len(response.content), bucket, key)
        return response.content
