"""
Prompt加载器 - 从YAML配置文件加载识别Prompt
"""
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from slam.config import settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "prompts" / "sport_recognition.yaml"


class PromptLoader:
    """Prompt加载器"""

    def __init__(self, config_path: Optional[str] = None):
        path = config_path or settings.AI_PROMPT_PATH
        self.config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self):
        """加载配置文件，缺失或损坏时抛出"""
        with open(self.config_path, "r", encoding="utf-8") as f:
            self._config = yaml.safe_load(f) or {}
        logger.info(f"Prompt配置加载成功: {self.config_path}")

    def reload(self):
        """重新加载配置（支持热更新）"""
        self._load_config()

    @property
    def system_prompt(self) -> str:
        return self._config.get("system_prompt", "")

    @property
    def user_prompt_template(self) -> str:
        return self._config.get("user_prompt_template", "")

    def build_user_prompt(self, **kwargs) -> str:
        """
        构建用户Prompt（变量替换）

        Args:
            **kwargs: 模板变量

        Returns:
            填充后的Prompt
        """
        template = self.user_prompt_template
        try:
            return template.format(**kwargs)
        except KeyError as e:
            logger.error(f"Prompt模板变量缺失: {str(e)}")
            return template


_prompt_loader: Optional[PromptLoader] = None


def get_prompt_loader() -> PromptLoader:
    """获取默认Prompt加载器"""
    global _prompt_loader
    if _prompt_loader is None:
        _prompt_loader = PromptLoader()
    return _prompt_loader
