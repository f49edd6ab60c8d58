"""Configuration settings for mariasession."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..database.options import ConnectionOptions


class Settings(BaseSettings):
    """Application settings loaded from MARIADB_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MARIADB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: Optional[str] = Field(default=None)
    port: int = Field(default=3306)
    unix_socket: Optional[str] = Field(default=None)
    user: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)
    dbname: Optional[str] = Field(default=None)
    client_flag: int = Field(default=0)

    # Option files
    default_file: Optional[str] = Field(default=None)
    groups: Optional[str] = Field(default=None)

    # TLS
    ssl_key: Optional[str] = Field(default=None)
    ssl_cert: Optional[str] = Field(default=None)
    ssl_ca: Optional[str] = Field(default=None)
    ssl_capath: Optional[str] = Field(default=None)
    ssl_cipher: Optional[str] = Field(default=None)

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    # CLI Configuration
    default_output_format: str = Field(default="table")

    def to_connection_options(self) -> ConnectionOptions:
        """Build the immutable option set handed to Connection.connect()."""
        return ConnectionOptions(
            host=self.host,
            user=self.user,
            password=self.password,
            dbname=self.dbname,
            unix_socket=self.unix_socket,
            groups=self.groups,
            default_file=self.default_file,
            ssl_key=self.ssl_key,
            ssl_cert=self.ssl_cert,
            ssl_ca=self.ssl_ca,
            ssl_capath=self.ssl_capath,
            ssl_cipher=self.ssl_cipher,
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
