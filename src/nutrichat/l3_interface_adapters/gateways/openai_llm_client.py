"""Gateway: OpenAI-compatible LLM client — implements LLMClient port.

Works with any OpenAI-compatible API: OpenAI, Gemini, Groq, Together, vLLM, etc.
Images are sent inline as base64 data URLs.
"""

from __future__ import annotations

import base64

import openai

from nutrichat.l1_entities.llm_message import LLMMessage
from nutrichat.l2_use_cases.ports.llm_client import ChatResponse


def _data_url(mime: str, image: bytes) -> str:
    return f'data:{mime};base64,{base64.b64encode(image).decode("ascii")}'


def _to_openai(message: LLMMessage) -> dict:
    if not message.images:
        return {'role': message.role, 'content': message.content}
    parts: list[dict] = [{'type': 'text', 'text': message.content}]
    parts.extend(
        {'type': 'image_url', 'image_url': {'url': _data_url(message.image_mime, image)}} for image in message.images
    )
    return {'role': message.role, 'content': parts}


class OpenAICompatLLMClient:
    """Wraps openai.AsyncOpenAI to implement the LLMClient protocol."""

    def __init__(self, api_key: str | None = None, base_url: str = 'https://api.openai.com/v1') -> None:
        self._api_key = api_key
        self._base_url = base_url

    async def chat(self, model: str, messages: list[LLMMessage]) -> ChatResponse:
        client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        resp = await client.chat.completions.create(
            model=model,
            messages=[_to_openai(m) for m in messages],  # ty: ignore[invalid-argument-type] -- dict satisfies ChatCompletionMessageParam at runtime
        )
        content = resp.choices[0].message.content or ''
        prompt_tokens = resp.usage.prompt_tokens if resp.usage else 0
        return ChatResponse(content=content, prompt_tokens=prompt_tokens)

    async def chat_single(self, model: str, prompt: str) -> str:
        client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        resp = await client.chat.completions.create(
            model=model,
            messages=[{'role': 'user', 'content': prompt}],
        )
        return resp.choices[0].message.content or ''

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = openai.OpenAI(api_key=self._api_key, base_url=self._base_url)
            client.models.list()
            return True, ''
        except openai.AuthenticationError as e:
            return False, f'Authentication failed: {e}'
        except Exception as e:
            return False, f'Cannot connect to OpenAI-compatible API: {e}'

    def check_models(self, models: list[str]) -> list[str]:
        """Return model names that don't exist on the remote API.

        Falls back to empty list if the models endpoint is unsupported.
        """
        try:
            client = openai.OpenAI(api_key=self._api_key, base_url=self._base_url)
            missing = []
            for model in models:
                try:
                    client.models.retrieve(model)
                except openai.NotFoundError:
                    missing.append(model)
            return missing
        except Exception:
            return []
