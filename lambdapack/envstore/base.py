"""Environment store contract.

A store returns the raw bytes of a project's per-stage environment file.
Not-found and transient errors both surface as EnvironmentFetchFailed;
the packager never retries.
"""

from abc import ABC, abstractmethod

DEFAULT_KEY_PREFIX = "envVars"


def env_object_key(project_name: str, stage: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    """Object key of the environment file: <prefix>/<project>/<stage>."""
    parts = [p for p in (prefix.strip("/"), project_name, stage) if p]
    return "/".join(parts)


class EnvironmentStore(ABC):
    """Fetch-by-key access to per-stage environment files."""

    key_prefix: str = DEFAULT_KEY_PREFIX

    @abstractmethod
    def fetch_object(self, bucket: str, project_name: str, stage: str) -> bytes:
        """Return the environment file content.

        Raises:
            EnvironmentFetchFailed: The object is missing or the store errored.
        """
