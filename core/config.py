from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from functools import lru_cache


BASE_DIR = Path(__file__).resolve().parent.parent


class ViewerConfig(BaseModel):
    base_url: str = "http://127.0.0.1:8000"
    resource_route: str = "/resource"
    interval_ms: int = Field(10000, gt=0, description="轮询间隔（毫秒）")
    timeout_s: float = Field(5.0, gt=0, description="单次请求超时（秒）")
    output_path: Path = BASE_DIR / "latest_resource.png"

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000.0


class Settings(BaseSettings):
    APP_NAME: str = "resource_relay"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "resource_relay_server.log"

    # 资源文件：由外部导出流程写入，服务端只读
    RESOURCE_PATH: Path = BASE_DIR / "data" / "resource.png"
    RESOURCE_MEDIA_TYPE: Optional[str] = None

    VIEWER: ViewerConfig = ViewerConfig()

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
