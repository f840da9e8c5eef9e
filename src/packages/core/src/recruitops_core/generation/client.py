"""Best-effort generative text service (OpenAI, Gemini or Ollama)."""
import asyncio
from dataclasses import dataclass

import httpx
import structlog

logger = structlog.get_logger()

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROVIDERS = ("openai", "gemini", "ollama")


class GenerationError(Exception):
    """The provider call could not produce text."""


@dataclass
class GenerationResult:
    ok: bool
    text: str | None = None
    error: str | None = None
    model: str | None = None


class GenerationClient:
    """Calls the configured provider and reports failures as results.

    Every call is bounded by ``timeout`` seconds in total, so a slow provider
    cannot hold a bulk action slot indefinitely.
    """

    def __init__(
        self,
        provider: str = "openai",
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {provider}")
        self.provider = provider
        self.api_key = api_key or ""
        self.model = model or {
            "openai": "gpt-4",
            "gemini": "gemini-2.0-flash",
            "ollama": "llama3.2",
        }[provider]
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    @property
    def model_name(self) -> str:
        return f"{self.provider}/{self.model}"

    async def generate(
        self,
        system_prompt: str,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 300,
    ) -> GenerationResult:
        """Generate text; never raises for provider or network failures."""
        try:
            text = await asyncio.wait_for(
                self._call(system_prompt, prompt, temperature, max_tokens),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("generation_timeout", provider=self.provider, timeout=self.timeout)
            return GenerationResult(ok=False, error="generation timed out", model=self.model_name)
        except (GenerationError, httpx.HTTPError, ValueError) as e:
            logger.warning("generation_failed", provider=self.provider, error=str(e))
            return GenerationResult(ok=False, error=str(e) or type(e).__name__, model=self.model_name)
        text = (text or "").strip()
        if not text:
            return GenerationResult(ok=False, error="empty completion", model=self.model_name)
        return GenerationResult(ok=True, text=text, model=self.model_name)

    async def _call(self, system_prompt: str, prompt: str, temperature: float, max_tokens: int) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            if self.provider == "gemini":
                return await self._call_gemini(client, system_prompt, prompt, temperature, max_tokens)
            if self.provider == "ollama":
                return await self._call_ollama(client, system_prompt, prompt, temperature, max_tokens)
            return await self._call_openai(client, system_prompt, prompt, temperature, max_tokens)

    async def _call_openai(self, client, system_prompt, prompt, temperature, max_tokens) -> str:
        """Call an OpenAI-compatible chat completions endpoint."""
        if not self.api_key:
            raise GenerationError("OPENAI_API_KEY not configured")
        response = await client.post(
            self.base_url or OPENAI_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )
        if response.status_code != 200:
            raise GenerationError(f"OpenAI API error: {response.status_code}")
        data = response.json()
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("Failed to parse OpenAI response") from e

    async def _call_gemini(self, client, system_prompt, prompt, temperature, max_tokens) -> str:
        """Call Google Gemini API."""
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY not configured")
        # Gemini has no system role in the basic API
        contents = [
            {"role": "user", "parts": [{"text": f"[SYSTEM CONTEXT]\n{system_prompt}\n[END SYSTEM CONTEXT]"}]},
            {"role": "model", "parts": [{"text": "Understood."}]},
            {"role": "user", "parts": [{"text": prompt}]},
        ]
        response = await client.post(
            self.base_url or GEMINI_URL.format(model=self.model),
            params={"key": self.api_key},
            json={
                "contents": contents,
                "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
            },
        )
        if response.status_code != 200:
            raise GenerationError(f"Gemini API error: {response.status_code}")
        data = response.json()
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("Failed to parse Gemini response") from e

    async def _call_ollama(self, client, system_prompt, prompt, temperature, max_tokens) -> str:
        """Call a local Ollama chat endpoint."""
        url = f"{(self.base_url or 'http://ollama:11434').rstrip('/')}/api/chat"
        response = await client.post(
            url,
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                "stream": False,
                "options": {"temperature": temperature, "num_predict": max_tokens},
            },
        )
        if response.status_code != 200:
            raise GenerationError(f"Ollama API error: {response.status_code}")
        return response.json().get("message", {}).get("content", "")
