"""
OpenAI 兼容接口的对话模型客户端
"""
import logging
from typing import Any, Dict, List, Optional
from openai import AsyncOpenAI, OpenAIError

from slam.ai.base import ChatClient, ChatRequest
from slam.config import settings
from slam.exceptions import RecognitionError

logger = logging.getLogger(__name__)


class OpenAICompatibleChatClient(ChatClient):
    """OpenAI 兼容接口（OpenAI / 通义千问 / 豆包等）"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model_name = model or settings.AI_MODEL
        self.client = client or AsyncOpenAI(
            api_key=api_key or settings.AI_API_KEY,
            base_url=base_url or settings.AI_BASE_URL,
        )

    @property
    def name(self) -> str:
        return "openai"

    def _build_messages(self, request: ChatRequest) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = [{"type": "text", "text": request.user_prompt}]
        for image in request.images:
            content.append({"type": "image_url", "image_url": {"url": image}})
        return [
            {"role": "system", "content": request.system_prompt},
            {"role": "user", "content": content},
        ]

    async def complete(self, request: ChatRequest) -> str:
        logger.info(f"调用{self.model_name}识别运动截图: images={len(request.images)}")
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=self._build_messages(request),
                temperature=0,
                max_tokens=settings.AI_MAX_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"识别请求失败: {str(e)}")
            raise RecognitionError(f"LLM API 请求失败: {e}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RecognitionError("LLM 返回内容为空")

        usage = response.usage
        logger.info(f"识别完成: tokens={usage.total_tokens if usage else None}")
        return content

    async def close(self):
        await self.client.close()
