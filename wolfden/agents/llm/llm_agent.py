"""LLM agent: talks to each AI player's chat-completion endpoint."""

import json
from typing import Any, Callable, Dict, List, Optional
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type
from tenacity.wait import wait_base

from wolfden.core.base_agent import BaseAgent
from wolfden.core.exceptions import AgentError, LLMError
from wolfden.core.types import ActionResult, NO_TARGET
from wolfden.core.utils import extract_json_object, truncate_string
from wolfden.game import prompts
from wolfden.llm_interface.base import BaseLLMClient, LLMResponse
from wolfden.llm_interface.openai_compat import OpenAICompatibleClient

ClientFactory = Callable[..., BaseLLMClient]


class LLMAgent(BaseAgent):
    """Decides for AI players by prompting their configured model.

    For every decision the agent builds a context-scoped system prompt,
    sends one chat-completion request to the player's endpoint and parses
    the first JSON object out of the reply. Missing credentials, network or
    HTTP failures and unparsable replies all degrade to the fallback
    decision; nothing is raised to the engine.
    """

    def __init__(
        self,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        max_attempts: int = 1,
        request_timeout: Optional[float] = None,
        client_factory: Optional[ClientFactory] = None,
        retry_wait: Optional[wait_base] = None,
        name: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """Initialize LLM agent.

        Args:
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            max_attempts: Requests per decision before falling back
            request_timeout: Per-request timeout in seconds (None = no timeout)
            client_factory: Builds a client from (base_url, api_key, model, ...);
                defaults to OpenAICompatibleClient
            retry_wait: tenacity wait strategy between attempts
                (default: exponential, 2-10 seconds)
            name: Human-readable name
            config: Additional configuration
        """
        super().__init__(name=name, config=config)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self.request_timeout = request_timeout
        self.client_factory = client_factory or OpenAICompatibleClient
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        self._clients: Dict[int, BaseLLMClient] = {}

    @classmethod
    def from_config(cls, config, **kwargs) -> "LLMAgent":
        """Build from a WerewolfConfig."""
        return cls(
            temperature=config.ai_temperature,
            max_tokens=config.ai_max_tokens,
            max_attempts=config.ai_max_attempts,
            request_timeout=config.ai_request_timeout,
            **kwargs
        )

    def _client_for(self, player) -> BaseLLMClient:
        client = self._clients.get(player.id)
        if client is None:
            cfg = player.ai_config
            client = self.client_factory(
                base_url=cfg.base_url,
                api_key=cfg.api_key,
                model=cfg.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.request_timeout,
            )
            self._clients[player.id] = client
        return client

    async def _call_llm(self, client: BaseLLMClient, messages: List[Dict[str, str]]) -> LLMResponse:
        """Call the model, retrying transport failures up to max_attempts."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type(LLMError),
            reraise=True,
        ):
            with attempt:
                response = await client.chat_completion(messages=messages)
        return response

    async def decide(self, player, state, instruction, valid_targets, is_speech=False) -> ActionResult:
        self.decisions += 1

        if player.ai_config is None or not player.ai_config.api_key:
            self.fallbacks += 1
            return self.fallback(valid_targets, prompts.UNCONFIGURED_AI)

        system_prompt = prompts.build_ai_prompt(player, state, instruction, valid_targets, is_speech)
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompts.DECIDE_NOW},
        ]

        try:
            client = self._client_for(player)
            response = await self._call_llm(client, messages)
            if self.logger:
                self.logger.log_llm_call(
                    player_id=player.id,
                    model=response.model,
                    prompt_tokens=response.prompt_tokens,
                    completion_tokens=response.completion_tokens,
                    response=response.content,
                )
            return self.parse_response(response.content, valid_targets)
        except Exception as e:
            self.fallbacks += 1
            print(f"      ⚠️  AI fallback for player {player.id}: {truncate_string(str(e))}")
            if self.logger:
                self.logger.log_error(
                    error_type=e.__class__.__name__,
                    message=str(e),
                    details={"sub_phase": state.sub_phase.value if state.sub_phase else None},
                    player_id=player.id,
                )
            return self.fallback(valid_targets, prompts.AI_ERROR)

    def parse_response(self, content: str, valid_targets: List[int]) -> ActionResult:
        """Parse a model reply into a decision.

        The first balanced JSON object is used. An action that is not an
        integer, or is neither 0 nor a valid target, is replaced by the
        fallback action while speech and thought are kept.

        Raises:
            AgentError: If no JSON object can be parsed
        """
        json_str = extract_json_object(content or "")
        if json_str is None:
            raise AgentError("No JSON object in response", details={"response": truncate_string(content or "")})

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise AgentError(f"Invalid JSON: {e}", details={"response": truncate_string(json_str)})

        if not isinstance(data, dict):
            raise AgentError("JSON response is not an object")

        action = _coerce_action(data.get("action"))
        if action is None or (action != NO_TARGET and action not in valid_targets):
            action = valid_targets[0] if valid_targets else NO_TARGET

        return ActionResult(
            action=action,
            speech=_as_text(data.get("speech")),
            thought=_as_text(data.get("thought")),
        )

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats["clients"] = {pid: c.get_stats() for pid, c in self._clients.items()}
        return stats


def _coerce_action(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
