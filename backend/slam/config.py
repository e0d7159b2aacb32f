"""
应用配置管理
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置"""

    # 应用配置
    APP_NAME: str = "SLAM Sport"
    APP_VERSION: str = "0.3.0"
    DEBUG: bool = False

    # 数据库
    DATABASE_URL: str = "sqlite+aiosqlite:///./sport.db"

    # 统计结果缓存
    CACHE_BACKEND: str = "memory"  # memory | redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_KEY_PREFIX: str = "slam:stats"
    CACHE_TTL_SECONDS: int = 0  # 0 表示不过期

    # 服务器时区（XML 中的本地时间按此时区解释）
    TZ: str = "Asia/Shanghai"

    # 分页
    LIST_PAGE_SIZE_DEFAULT: int = 20
    LIST_PAGE_SIZE_MAX: int = 100

    # 小米导出：超过该值的时间戳视为毫秒
    XIAOMI_MS_THRESHOLD: int = 1_000_000_000_000

    # AI识别（OpenAI兼容接口）
    AI_API_KEY: str = ""
    AI_BASE_URL: str = "https://api.openai.com/v1"
    AI_MODEL: str = "gpt-4o-mini"
    AI_PROMPT_PATH: Optional[str] = None
    AI_MAX_TOKENS: int = 4000

    # 日志配置
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"  # 忽略额外的环境变量
    )

    @property
    def cache_ttl(self) -> Optional[int]:
        """缓存过期秒数，未配置时为None"""
        return self.CACHE_TTL_SECONDS if self.CACHE_TTL_SECONDS > 0 else None


settings = Settings()
