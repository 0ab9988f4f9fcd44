"""Gateway: Ollama LLM client — implements LLMClient port."""

from __future__ import annotations

import ollama as ollama_sync

from nutrichat.l1_entities.llm_message import LLMMessage
from nutrichat.l2_use_cases.ports.llm_client import ChatResponse


def _to_ollama(message: LLMMessage) -> dict:
    payload: dict = {'role': message.role, 'content': message.content}
    if message.images:
        payload['images'] = list(message.images)
    return payload


class OllamaLLMClient:
    """Wraps ollama.AsyncClient to implement the LLMClient protocol."""

    def __init__(self, host: str = 'http://localhost:11434') -> None:
        self._host = host

    async def chat(self, model: str, messages: list[LLMMessage]) -> ChatResponse:
        client = ollama_sync.AsyncClient(host=self._host)
        resp = await client.chat(model=model, messages=[_to_ollama(m) for m in messages])
        return ChatResponse(
            content=resp.message.content or '',
            prompt_tokens=getattr(resp, 'prompt_eval_count', 0) or 0,
        )

    async def chat_single(self, model: str, prompt: str) -> str:
        client = ollama_sync.AsyncClient(host=self._host)
        resp = await client.chat(
            model=model,
            messages=[{'role': 'user', 'content': prompt}],
        )
        return resp.message.content or ''

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = ollama_sync.Client(host=self._host)
            client.list()
            return True, ''
        except Exception as e:
            return False, f'Cannot connect to Ollama: {e}'

    def check_models(self, models: list[str]) -> list[str]:
        """Return model names not pulled locally. Empty list if Ollama is unreachable."""
        try:
            client = ollama_sync.Client(host=self._host)
            missing = []
            for model in models:
                try:
                    client.show(model)
                except ollama_sync.ResponseError:
                    missing.append(model)
            return missing
        except Exception:
            return []
