from pydantic import Field, NonNegativeFloat, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpClientSettings(BaseSettings):
    REQUEST_TIMEOUT: PositiveFloat | None = Field(
        description="Deadline in seconds for sending a request and receiving its headers",
        default=None,
    )

    MAX_CONNECTIONS: PositiveInt = Field(
        description="Maximum number of concurrent transport connections",
        default=100,
    )

    MAX_KEEPALIVE: PositiveInt = Field(
        description="Maximum number of idle keep-alive connections",
        default=20,
    )

    KEEPALIVE_EXPIRY: NonNegativeFloat = Field(
        description="Seconds an idle keep-alive connection is kept open",
        default=30.0,
    )

    PROXY_URL: str = Field(
        description="Proxy URL for all requests, empty for a direct connection",
        default="",
    )

    DEFAULT_ENCODING: str = Field(
        description="Codec used for text and form bodies when a call does not name one",
        default="utf-8",
    )

    model_config = SettingsConfigDict(
        env_prefix="HTTP_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
