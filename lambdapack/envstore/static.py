"""In-memory environment store for hosts that already hold the env data."""

from lambdapack.envstore.base import DEFAULT_KEY_PREFIX, EnvironmentStore, env_object_key
from lambdapack.errors import EnvironmentFetchFailed


class StaticEnvironmentStore(EnvironmentStore):
    """Serves environment files from a `{(bucket, key): bytes}` mapping."""

    def __init__(
        self,
        objects: dict[tuple[str, str], bytes] | None = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ):
        self.key_prefix = key_prefix
        self._objects: dict[tuple[str, str], bytes] = dict(objects or {})

    def put(self, bucket: str, project_name: str, stage: str, data: bytes | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        key = env_object_key(project_name, stage, self.key_prefix)
        self._objects[(bucket, key)] = data

    def fetch_object(self, bucket: str, project_name: str, stage: str) -> bytes:
        key = env_object_key(project_name, stage, self.key_prefix)
        try:
            return self._objects[(bucket, key)]
        except KeyError:
            raise EnvironmentFetchFailed(
                f"Environment file s3://{bucket}/{key} not found",
                detail=f"{bucket}/{key}",
            ) from None
