"""Configuration schema using Pydantic.

Read by the CLI only; the library itself takes explicit arguments.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """Listener settings for ``boxcar serve``."""
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=0, le=65535)
    dispatch: Literal["thread", "pool"] = "thread"
    workers: int = Field(default=8, ge=1)  # pool only
    queue_size: int = Field(default=0, ge=0)  # pool only; 0 = unbounded
    handlers: dict[str, str] = Field(default_factory=dict)  # name -> "module:attr"

    @field_validator("handlers")
    @classmethod
    def _check_handlers(cls, value: dict[str, str]) -> dict[str, str]:
        for name, target in value.items():
            if not name or "." in name:
                raise ValueError(f"invalid handler name: {name!r}")
            if ":" not in target:
                raise ValueError(f"handler {name} must be 'module:attr', got {target!r}")
        return value


class ClientConfig(BaseModel):
    """Defaults for outbound calls (``boxcar call`` and friends)."""
    url: str = "http://127.0.0.1:8080/RPC2"
    timeout: float | None = None  # seconds; None blocks indefinitely
    proxy: str | None = None


class BoxcarConfig(BaseSettings):
    """Root configuration for boxcar."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)

    model_config = SettingsConfigDict(
        env_prefix="BOXCAR_",
        env_nested_delimiter="__",
    )
