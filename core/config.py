"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class RedisSettings(BaseModel):
    url: Optional[str] = None
    max_connections: int = 10
    namespace: str = "paghiper-bridge"
    # Seconds a processed notification id is remembered
    notification_receipt_ttl: int = 7 * 24 * 3600


class DatabaseSettings(BaseModel):
    url: str = "sqlite+aiosqlite:///./paghiper.db"


class StoreApiSettings(BaseModel):
    base_url: str = "https://api.e-com.plus/v1"
    # This app's id on the platform; a store auth row may override it
    application_id: Optional[str] = None
    timeout: float = 30.0
    max_retries: int = 0
    retry_delay: float = 0.5


class PagHiperSettings(BaseModel):
    base_url: str = "https://api.paghiper.com"
    notification_path: str = "/transaction/notification/"
    timeout: float = 30.0
    max_retries: int = 0
    retry_delay: float = 0.5


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="PagHiper Notification Bridge")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")

    redis: RedisSettings = Field(default_factory=RedisSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    store_api: StoreApiSettings = Field(default_factory=StoreApiSettings)
    paghiper: PagHiperSettings = Field(default_factory=PagHiperSettings)

    # CORS配置
    CORS_ORIGINS: list = Field(default=["http://localhost:3000", "http://localhost:8000"])

    # 日志/请求体记录配置
    LOG_REQUEST_BODY_ENABLE_BY_DEFAULT: bool = Field(default=True)
    LOG_REQUEST_BODY_MAX_BYTES: int = Field(default=2048)
    LOG_REQUEST_BODY_ALLOW_MULTIPART: bool = Field(default=False)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """允许 JSON 字符串或逗号分隔字符串两种格式。"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                import json
                try:
                    arr = json.loads(s)
                    if isinstance(arr, list):
                        return arr
                except ValueError:
                    pass
            if "," in s:
                return [item.strip() for item in s.split(",") if item.strip()]
            return [s]
        return v


settings = Settings()
