"""Environment stores that hold per-stage environment files.

Public API:
    create_environment_store(settings) -> EnvironmentStore
"""

from lambdapack.core.config import Settings
from lambdapack.envstore.base import EnvironmentStore, env_object_key
from lambdapack.envstore.http import HttpEnvironmentStore
from lambdapack.envstore.s3 import S3EnvironmentStore
from lambdapack.envstore.static import StaticEnvironmentStore


def create_environment_store(settings: Settings) -> EnvironmentStore:
    """Build the store selected by `settings.env_store`."""
    if settings.env_store == "http":
        return HttpEnvironmentStore(
            storage_url=settings.storage_url,
            service_key=settings.storage_service_key,
            key_prefix=settings.env_key_prefix,
            timeout=settings.storage_timeout,
        )
    if settings.env_store == "static":
        return StaticEnvironmentStore(key_prefix=settings.env_key_prefix)
    return S3EnvironmentStore(region=settings.aws_region, key_prefix=settings.env_key_prefix)


__all__ = [
    "EnvironmentStore",
    "HttpEnvironmentStore",
    "S3EnvironmentStore",
    "StaticEnvironmentStore",
    "create_environment_store",
    "env_object_key",
]
