"""
运动截图识别服务：图片 -> LLM -> XML -> 运动记录
"""
import base64
import logging
import re
from typing import List, Optional, Union

from slam.ai.base import ChatClient, ChatRequest
from slam.ai.prompt_loader import PromptLoader, get_prompt_loader
from slam.config import settings
from slam.exceptions import ParseError, RecognitionError
from slam.parsers.sport_xml import parse_sport_xml
from slam.schemas.sport import SportRecord

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:xml)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_SPORT_RE = re.compile(r"<sport\b.*</sport>", re.DOTALL)


def extract_xml(reply: str) -> str:
    """从模型回复中取出 <sport> 文档（去掉 Markdown 代码块与多余说明）"""
    fenced = _FENCE_RE.search(reply)
    text = fenced.group(1) if fenced else reply
    match = _SPORT_RE.search(text)
    return match.group(0) if match else text.strip()


def to_image_url(image: Union[str, bytes]) -> str:
    """图片转为 data URL（已是 URL 的原样返回）"""
    if isinstance(image, bytes):
        return f"data:image/jpeg;base64,{base64.b64encode(image).decode('ascii')}"
    if image.startswith(("data:", "http://", "https://")):
        return image
    return f"data:image/jpeg;base64,{image}"


class SportRecognitionService:
    """运动截图识别服务（失败不重试，由调用方决定）"""

    def __init__(
        self,
        client: ChatClient,
        prompt_loader: Optional[PromptLoader] = None,
        tz_name: Optional[str] = None,
    ):
        self.client = client
        self.prompt_loader = prompt_loader or get_prompt_loader()
        self.tz_name = tz_name or settings.TZ

    async def recognize(self, images: List[Union[str, bytes]]) -> SportRecord:
        """
        识别运动截图

        Args:
            images: 已切分/压缩的图片（bytes、base64 或 URL）

        Returns:
            未入库的运动记录

        Raises:
            RecognitionError: 模型调用失败
            ParseError: 模型回复不是合法的运动XML
        """
        if not images:
            raise RecognitionError("没有可识别的图片", code=400)

        request = ChatRequest(
            system_prompt=self.prompt_loader.system_prompt,
            user_prompt=self.prompt_loader.build_user_prompt(timezone=self.tz_name),
            images=[to_image_url(image) for image in images],
        )
        reply = await self.client.complete(request)

        try:
            sport = parse_sport_xml(extract_xml(reply), self.tz_name)
        except ParseError as e:
            logger.error(f"识别结果解析失败: {e}\n内容: {reply[:500]}")
            raise
        logger.info(f"识别成功: type={sport.kind.value}, tracks={len(sport.tracks)}")
        return sport
