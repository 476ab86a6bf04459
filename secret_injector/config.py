"""
Configuration management for the secret injector using Pydantic.
"""

from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Listener configuration shared by every web service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    bind_address: str = Field(
        default="0.0.0.0", validation_alias=AliasChoices("BIND_ADDRESS", "bind_address")
    )
    port: int = Field(default=8443, ge=1, le=65535, validation_alias=AliasChoices("PORT", "port"))
    uds_path: Optional[Path] = Field(default=None, validation_alias=AliasChoices("UDS_PATH", "uds_path"))

    # TLS configuration
    tls_cert_path: Optional[Path] = Field(
        default=None, validation_alias=AliasChoices("TLS_CERT_PATH", "tls_cert_path")
    )
    tls_key_path: Optional[Path] = Field(
        default=None, validation_alias=AliasChoices("TLS_KEY_PATH", "tls_key_path")
    )

    debug: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    @field_validator("tls_cert_path", "tls_key_path")
    @classmethod
    def validate_paths(cls, v):
        """Validate that TLS material exists if specified."""
        if v is not None and not Path(v).exists():
            raise ValueError(f"Path does not exist: {v}")
        return v

    def export_json(self) -> str:
        """Export configuration as JSON."""
        return self.model_dump_json(indent=2)


class InjectorConfig(ServerConfig):
    """Configuration for the 1Password Connect secret injector."""

    # Connect coordinates injected into every mutated container
    connect_host: str = Field(
        default="http://onepassword-connect:8080",
        validation_alias=AliasChoices("OP_CONNECT_HOST", "connect_host"),
    )
    connect_token_name: str = Field(
        default="onepassword-token",
        validation_alias=AliasChoices("OP_CONNECT_TOKEN_NAME", "connect_token_name"),
    )
    connect_token_key: str = Field(
        default="token",
        validation_alias=AliasChoices("OP_CONNECT_TOKEN_KEY", "connect_token_key"),
    )

    # Image the bootstrap init container copies the op binary from
    op_image: str = Field(default="1password/op", validation_alias=AliasChoices("OP_IMAGE", "op_image"))

    ignored_namespaces: Annotated[List[str], NoDecode] = Field(
        default=["kube-system", "kube-public"],
        validation_alias=AliasChoices("IGNORED_NAMESPACES", "ignored_namespaces"),
    )

    @field_validator("ignored_namespaces", mode="before")
    @classmethod
    def parse_namespaces(cls, v):
        """Parse comma-separated namespace list from environment."""
        if isinstance(v, str):
            return [ns.strip() for ns in v.split(",") if ns.strip()]
        return v

    @field_validator("connect_host", "connect_token_name", "connect_token_key")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("value must not be blank")
        return v


def load_config(**kwargs) -> InjectorConfig:
    """Load configuration with environment variables and optional overrides."""
    return InjectorConfig(**kwargs)
