"""Tests for screenshot recognition: prompt loading, chat client and XML extraction."""

import base64
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from slam.ai.base import ChatClient, ChatRequest
from slam.ai.prompt_loader import PromptLoader
from slam.ai.providers.openai_compat import OpenAICompatibleChatClient
from slam.exceptions import ParseError, RecognitionError
from slam.schemas.sport import SportKind
from slam.services.recognition_service import SportRecognitionService, extract_xml, to_image_url

SPORT_XML = (
    "<sport><type>Running</type><start_time>2025-05-17 20:28:00</start_time>"
    "<calories>291</calories><distance_meter>4820</distance_meter>"
    "<duration_second>1872</duration_second><heart_rate_avg>158</heart_rate_avg>"
    "<heart_rate_max>172</heart_rate_max><extra><speed_avg>9.26</speed_avg></extra></sport>"
)


class FakeChatClient(ChatClient):

    def __init__(self, reply):
        self.reply = reply
        self.requests = []

    @property
    def name(self):
        return "fake"

    async def complete(self, request):
        self.requests.append(request)
        return self.reply


@pytest.fixture
def prompt_loader(tmp_path):
    path = tmp_path / "prompt.yaml"
    path.write_text(
        "system_prompt: 只输出XML\nuser_prompt_template: 时区 {timezone}\n",
        encoding="utf-8",
    )
    return PromptLoader(str(path))


# ======================================================================
# Helpers
# ======================================================================


class TestExtractXml:

    def test_plain(self):
        assert extract_xml(SPORT_XML) == SPORT_XML

    def test_fenced(self):
        assert extract_xml(f"```xml\n{SPORT_XML}\n```") == SPORT_XML

    def test_surrounding_text(self):
        assert extract_xml(f"识别结果如下：\n{SPORT_XML}\n以上。") == SPORT_XML

    def test_no_sport_element(self):
        assert extract_xml("  sorry  ") == "sorry"


class TestImageUrl:

    def test_bytes(self):
        assert to_image_url(b"\x89PNG") == "data:image/jpeg;base64," + base64.b64encode(b"\x89PNG").decode()

    @pytest.mark.parametrize("url", ["data:image/png;base64,AAAA", "https://example.com/a.jpg"])
    def test_urls_unchanged(self, url):
        assert to_image_url(url) == url

    def test_bare_base64(self):
        assert to_image_url("AAAA") == "data:image/jpeg;base64,AAAA"


class TestPromptLoader:

    def test_build_user_prompt(self, prompt_loader):
        assert prompt_loader.system_prompt == "只输出XML"
        assert prompt_loader.build_user_prompt(timezone="UTC").strip() == "时区 UTC"

    def test_missing_variable_returns_template(self, prompt_loader):
        assert prompt_loader.build_user_prompt().strip() == "时区 {timezone}"

    def test_default_prompt_file(self):
        loader = PromptLoader()
        assert "<sport>" in loader.user_prompt_template
        assert "Asia/Shanghai" in loader.build_user_prompt(timezone="Asia/Shanghai")

    def test_reload(self, prompt_loader):
        prompt_loader.config_path.write_text("system_prompt: v2\n", encoding="utf-8")
        prompt_loader.reload()
        assert prompt_loader.system_prompt == "v2"
        assert prompt_loader.user_prompt_template == ""


# ======================================================================
# Recognition service
# ======================================================================


class TestSportRecognitionService:

    @pytest.mark.asyncio
    async def test_recognize(self, prompt_loader):
        client = FakeChatClient(f"```xml\n{SPORT_XML}\n```")
        service = SportRecognitionService(client, prompt_loader, tz_name="UTC")

        sport = await service.recognize([b"img1", "https://example.com/2.jpg"])

        assert sport.id == 0
        assert sport.kind is SportKind.RUNNING
        assert sport.start_time == 1747513680
        assert sport.extra.speed_avg == pytest.approx(9.26)

        request = client.requests[0]
        assert request.system_prompt == "只输出XML"
        assert request.user_prompt.strip() == "时区 UTC"
        assert request.images[1] == "https://example.com/2.jpg"
        assert request.images[0].startswith("data:image/jpeg;base64,")

    @pytest.mark.asyncio
    async def test_empty_images(self, prompt_loader):
        client = FakeChatClient(SPORT_XML)
        service = SportRecognitionService(client, prompt_loader)
        with pytest.raises(RecognitionError) as exc:
            await service.recognize([])
        assert exc.value.code == 400
        assert client.requests == []

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, prompt_loader):
        service = SportRecognitionService(FakeChatClient("I cannot read this image."), prompt_loader)
        with pytest.raises(ParseError):
            await service.recognize([b"img"])


# ======================================================================
# OpenAI compatible client
# ======================================================================


def _fake_openai(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _response(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=42),
    )


REQUEST = ChatRequest(system_prompt="sys", user_prompt="user", images=["data:image/jpeg;base64,AAAA"])


class TestOpenAICompatibleChatClient:

    @pytest.mark.asyncio
    async def test_complete(self):
        calls = []

        async def create(**kwargs):
            calls.append(kwargs)
            return _response(SPORT_XML)

        client = OpenAICompatibleChatClient(model="vision-test", client=_fake_openai(create))
        assert await client.complete(REQUEST) == SPORT_XML

        messages = calls[0]["messages"]
        assert calls[0]["model"] == "vision-test"
        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1]["content"][0] == {"type": "text", "text": "user"}
        assert messages[1]["content"][1]["image_url"]["url"] == "data:image/jpeg;base64,AAAA"

    @pytest.mark.asyncio
    async def test_api_error(self):
        async def create(**kwargs):
            raise OpenAIError("quota exceeded")

        client = OpenAICompatibleChatClient(client=_fake_openai(create))
        with pytest.raises(RecognitionError):
            await client.complete(REQUEST)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, ""])
    async def test_empty_reply(self, content):
        async def create(**kwargs):
            return _response(content)

        client = OpenAICompatibleChatClient(client=_fake_openai(create))
        with pytest.raises(RecognitionError):
            await client.complete(REQUEST)
