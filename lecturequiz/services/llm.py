import logging
from typing import Any, Dict, Optional

import httpx

log = logging.getLogger("LectureQuiz")


class LLMError(Exception):
    """Upstream model call failed (HTTP error, transport error, empty body)."""


class LLMAuthError(LLMError):
    pass


class LLMClient:
    """
    OpenAI-compatible LLM client:
    - Default: local OpenAI-compatible server (e.g., Ollama)
    - Remote: OpenAI or Groq when an api_key is configured

    Supports:
    - OpenAI-style /chat/completions (local or remote)
    - OpenAI /responses (remote) with compatible parsing
    """

    def __init__(
        self,
        base_url: str,
        default_model: str,
        *,
        api_key: str = "",
        prefer_responses_api: bool = False,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.default_model = default_model
        self.api_key = (api_key or "").strip()
        self.prefer_responses_api = bool(prefer_responses_api)
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _raise_for_status(self, r: httpx.Response) -> None:
        if r.status_code == 401:
            raise LLMAuthError("Invalid API key (401). Check your .env configuration.")
        if r.status_code >= 400:
            body = (r.text or "")[:500]
            raise LLMError(f"LLM error ({r.status_code}): {body}")

    async def ask(
        self,
        prompt: str,
        system: str = "You are a helpful study assistant.",
        model: Optional[str] = None,
        max_tokens: int = 400,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> str:
        system = system or "You are a helpful study assistant."
        used_model = model or self.default_model

        if not self.base_url:
            raise LLMError("LLM misconfigured: missing base_url.")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                if self.prefer_responses_api and self.api_key:
                    return await self._ask_responses(
                        client, used_model, system, prompt, max_tokens, temperature
                    )
                return await self._ask_chat(
                    client, used_model, system, prompt, max_tokens, temperature, json_mode
                )
        except httpx.HTTPError as e:
            log.warning("LLM transport error: %s", e)
            raise LLMError(f"LLM request failed: {e}") from e
        except ValueError as e:
            raise LLMError("LLM returned a non-JSON response body.") from e

    async def _ask_responses(
        self,
        client: httpx.AsyncClient,
        model: str,
        system: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        url = f"{self.base_url}/responses"
        payload = {
            "model": model,
            "input": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_output_tokens": max_tokens,
        }

        r = await client.post(url, headers=self._headers(), json=payload)
        self._raise_for_status(r)
        data = r.json()

        if isinstance(data, dict) and "output_text" in data:
            out = str(data.get("output_text") or "").strip()
            if out:
                return out

        if isinstance(data, dict) and isinstance(data.get("output"), list):
            texts = []
            for item in data["output"]:
                content = item.get("content") if isinstance(item, dict) else None
                if isinstance(content, list):
                    for part in content:
                        if isinstance(part, dict):
                            if "text" in part:
                                texts.append(str(part["text"]))
                            elif part.get("type") == "output_text" and "content" in part:
                                texts.append(str(part["content"]))
            out = "\n".join([t for t in texts if t]).strip()
            if out:
                return out

        return ""

    async def _ask_chat(
        self,
        client: httpx.AsyncClient,
        model: str,
        system: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
        json_mode: bool,
    ) -> str:
        url = f"{self.base_url}/chat/completions"
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        r = await client.post(url, headers=self._headers(), json=payload)
        self._raise_for_status(r)
        data = r.json()

        if isinstance(data, dict) and data.get("choices"):
            choice0 = data["choices"][0] or {}
            msg = choice0.get("message") or {}
            content = (msg.get("content") or "").strip()
            if content:
                return content

            text = (choice0.get("text") or "").strip()
            if text:
                return text

            return ""

        if isinstance(data, dict) and "message" in data:
            return str(data["message"]).strip()

        if isinstance(data, dict) and "response" in data:
            return str(data["response"]).strip()

        return ""


def build_llm_client(
    provider: str,
    *,
    openai_base_url: str,
    default_model: str,
    openai_api_url: str = "https://api.openai.com/v1",
    openai_model: str = "gpt-4.1-mini",
    openai_api_key: str = "",
    groq_base_url: str = "https://api.groq.com/openai/v1",
    groq_model: str = "llama-3.1-8b-instant",
    groq_api_key: str = "",
) -> LLMClient:
    provider = (provider or "").strip().lower()

    if provider == "groq":
        # Groq has no /responses endpoint
        return LLMClient(
            base_url=groq_base_url,
            default_model=groq_model,
            api_key=groq_api_key,
            prefer_responses_api=False,
        )

    if provider == "openai":
        return LLMClient(
            base_url=openai_api_url,
            default_model=openai_model,
            api_key=openai_api_key,
            prefer_responses_api=True,
        )

    return LLMClient(base_url=openai_base_url, default_model=default_model)
