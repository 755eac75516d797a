from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Packager settings loaded from LAMBDAPACK_* environment variables.

    The environment store backend decides which of the storage fields are
    used: `s3` needs `aws_region`, `http` needs `storage_url` and
    `storage_service_key`, `static` needs nothing.
    """

    model_config = SettingsConfigDict(
        env_prefix="LAMBDAPACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Build directories are created under this root; system temp dir if unset.
    build_root: Optional[str] = None

    # Name of the environment file written into the build dir and the archive.
    env_file_name: str = ".env"

    # Environment store
    env_store: Literal["s3", "http", "static"] = "s3"
    env_key_prefix: str = "envVars"
    aws_region: Optional[str] = None
    storage_url: str = "http://localhost:54321"
    storage_service_key: str = ""
    storage_timeout: float = 30.0

    # External JS tooling
    browserify_bin: str = "browserify"
    uglify_bin: str = "uglifyjs"

    debug: bool = True

    @field_validator("env_file_name")
    @classmethod
    def env_file_name_is_relative(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"env_file_name must be a plain file name, got {v!r}")
        return v

    @field_validator("env_key_prefix")
    @classmethod
    def strip_key_prefix(cls, v: str) -> str:
        return v.strip("/")


def get_settings() -> Settings:
    return Settings()
