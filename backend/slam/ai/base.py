"""
对话模型客户端抽象接口
"""
from abc import ABC, abstractmethod
from typing import List
from pydantic import BaseModel


class ChatRequest(BaseModel):
    """识别请求"""
    system_prompt: str
    user_prompt: str
    images: List[str]  # data URL 或 http(s) URL


class ChatClient(ABC):
    """对话模型客户端：给定图片与提示词，返回原始文本（XML）"""

    @property
    @abstractmethod
    def name(self) -> str:
        """提供商名称"""
        pass

    @abstractmethod
    async def complete(self, request: ChatRequest) -> str:
        """
        发送识别请求

        Args:
            request: 识别请求

        Returns:
            模型原始回复

        Raises:
            RecognitionError: 调用失败或回复为空
        """
        pass

    async def close(self):
        """关闭客户端连接"""
        pass
