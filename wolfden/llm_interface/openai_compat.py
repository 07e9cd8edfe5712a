"""Client for OpenAI-compatible chat-completion endpoints."""

import asyncio

import aiohttp
from typing import List, Dict, Optional

from wolfden.llm_interface.base import BaseLLMClient, LLMResponse
from wolfden.core.exceptions import LLMError


class OpenAICompatibleClient(BaseLLMClient):
    """Client for any ``{base_url}/chat/completions`` endpoint.

    Works with OpenAI, OpenRouter, DeepSeek, local vLLM/Ollama gateways and
    anything else that speaks the chat-completion envelope.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        **kwargs
    ):
        """Initialize client.

        Args:
            base_url: Endpoint root, e.g. "https://openrouter.ai/api/v1"
            api_key: Bearer token
            model: Model identifier sent with every request
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Total request timeout in seconds (None waits indefinitely)
            **kwargs: Additional parameters
        """
        if not api_key:
            raise LLMError("API key not provided", details={"base_url": base_url, "model": model})

        super().__init__(api_key=api_key, model=model, temperature=temperature, max_tokens=max_tokens, **kwargs)

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Make a chat completion API call.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Override default temperature
            max_tokens: Override default max_tokens
            **kwargs: Additional parameters

        Returns:
            LLMResponse object

        Raises:
            LLMError: If the API call fails
        """
        temperature = temperature if temperature is not None else self.temperature
        max_tokens = max_tokens if max_tokens is not None else self.max_tokens

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(
                    self.api_url,
                    headers=self.headers,
                    json=payload
                ) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        raise LLMError(
                            f"API error (status {resp.status})",
                            details={"error": error_text[:500], "model": self.model}
                        )

                    data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise LLMError(f"Network error: {str(e)}", details={"model": self.model})
        except asyncio.TimeoutError:
            raise LLMError(
                f"Request timed out after {self.timeout}s",
                details={"model": self.model, "timeout": self.timeout}
            )
        except ValueError as e:
            raise LLMError(f"Malformed response envelope: {str(e)}", details={"model": self.model})

        if not isinstance(data, dict):
            raise LLMError("Response is not a JSON object", details={"model": self.model})

        # Check for API errors in response
        if "error" in data:
            error = data["error"]
            error_msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise LLMError(
                f"API returned error: {error_msg}",
                details={"error": error, "model": self.model}
            )

        choices = data.get("choices") or []
        if not choices:
            raise LLMError(
                "No choices returned from API",
                details={"model": self.model}
            )

        choice = choices[0]
        message = choice.get("message") or {}
        content = message.get("content") or ""

        usage = data.get("usage") or {}
        prompt_tokens = usage.get("prompt_tokens", 0)
        completion_tokens = usage.get("completion_tokens", 0)

        response = LLMResponse(
            content=content,
            model=self.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=usage.get("total_tokens", prompt_tokens + completion_tokens),
            finish_reason=choice.get("finish_reason"),
            metadata={"raw_response": data}
        )

        self._update_stats(response)
        return response
