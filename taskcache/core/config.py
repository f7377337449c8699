from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from fastapi import Depends
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TASKCACHE_")

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    cache_backend: Literal["redis", "memory", "none"] = "redis"
    redis_dsn: str = "redis://localhost:6379/0"
    redis_pool_size: int = Field(default=5, gt=0)
    cache_connect_timeout_seconds: float = Field(default=5.0, gt=0)
    cache_timeout_seconds: float = Field(default=1.0, gt=0)  # per cache call
    cache_namespace: str = ""
    memory_cache_maxsize: int = Field(default=2048, gt=0)

    list_ttl_seconds: int = Field(default=300, gt=0)  # all_tasks snapshot
    task_ttl_seconds: int = Field(default=3600, gt=0)  # task:<id>

    cache_on_create: bool = True
    invalidate_list_on_write: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()


SettingsDep = Annotated[Settings, Depends(get_settings)]
