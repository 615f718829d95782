"""LLM-backed decision provider using an OpenAI-compatible API (vLLM/Ollama)."""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from tycoon.agents.base import Decision, DecisionAction, DecisionProvider
from tycoon.agents.reserve import ReserveDecisionProvider
from tycoon.economy import owns_group
from tycoon.exceptions import DecisionError
from tycoon.settings import LLMSettings, get_llm_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an automated player in a property-trading board game. "
    "You stand on an unowned tile and must decide whether to buy it. "
    "Keep at least $200 in cash after buying unless the purchase completes a color group. "
    'Respond with ONLY a JSON object: {"action": "buy" | "decline", "rationale": "<one sentence>"}'
)


class LLMDecisionProvider(DecisionProvider):
    """
    Decision provider that asks a language model via the chat completions API.

    The provider:
    1. Serializes the relevant part of the game state
    2. Queries the model, retrying once with error feedback
    3. Validates the answer against what the player can afford
    4. Falls back to a reserve rule if the model cannot be used

    Configuration via environment variables (see LLMSettings in `tycoon.settings`).
    """

    def __init__(
        self,
        settings: Optional[LLMSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        fallback: Optional[ReserveDecisionProvider] = None,
        max_retries: int = 2,
    ):
        self.settings = settings or get_llm_settings()
        self.base_url = self.settings.base_url or "http://localhost:11434/v1"
        self.model_name = self.settings.model
        self.api_key = (
            self.settings.api_key.get_secret_value() if self.settings.api_key is not None else None
        )
        self.fallback = fallback or ReserveDecisionProvider()
        self.max_retries = max_retries
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout_seconds)
        return self._client

    async def decide(self, state, player_id: str) -> Decision:
        player = state.get_player(player_id)
        if player is None:
            return Decision(DecisionAction.DECLINE, "Unknown player.")

        prompt = self._build_prompt(state, player_id)
        error_msg = None

        for attempt in range(self.max_retries):
            try:
                content = await self._query_llm(prompt if attempt == 0 else self._retry_prompt(prompt, error_msg))
                decision = self._parse_response(content)
            except (httpx.HTTPError, DecisionError) as e:
                error_msg = str(e)
                logger.warning("LLM decision failed for %s (attempt %d): %s", player_id, attempt + 1, error_msg)
                continue

            spec = state.tile_spec(player.position)
            if decision.action == DecisionAction.BUY and player.money < spec.price:
                return Decision(DecisionAction.DECLINE, f"Cannot afford {spec.name} (${spec.price}).")
            logger.info("LLM player %s chose %s", player_id, decision.action.value)
            return decision

        logger.warning("LLM unavailable for %s, using reserve fallback", player_id)
        return self.fallback.decide_now(state, player_id)

    def _serialize_state(self, state, player_id: str) -> Dict[str, Any]:
        player = state.get_player(player_id)
        spec = state.tile_spec(player.position)
        opponents = [
            {"name": p.name, "money": p.money, "properties": len(p.properties)}
            for p in state.get_active_players()
            if p.player_id != player_id
        ]
        group_tiles = state.board.get_color_group(spec.group)
        owned_in_group = [t for t in group_tiles if state.tile_state(t).owner_id == player_id]
        return {
            "money": player.money,
            "tile": {"name": spec.name, "type": spec.tile_type.value, "group": spec.group.value, "price": spec.price},
            "owned_in_group": len(owned_in_group),
            "group_size": len(group_tiles),
            "would_complete_group": len(owned_in_group) == len(group_tiles) - 1
            and not owns_group(state, player_id, spec.group),
            "properties_owned": len(player.properties),
            "opponents": opponents,
        }

    def _build_prompt(self, state, player_id: str) -> str:
        return "\n".join(
            [
                "## Situation",
                "```json",
                json.dumps(self._serialize_state(state, player_id), indent=2),
                "```",
                "",
                "Decide now. Respond with ONLY the JSON object:",
            ]
        )

    def _retry_prompt(self, prompt: str, error: Optional[str]) -> str:
        return (
            f"{prompt}\n\n## IMPORTANT: Your previous response was INVALID!\n"
            f"**Error:** {error or 'invalid response'}\n"
            'Respond with ONLY {"action": "buy" | "decline", "rationale": "..."}'
        )

    async def _query_llm(self, prompt: str) -> str:
        """Query the model using the OpenAI-compatible chat completions API."""
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.settings.max_tokens,
            "temperature": 0.3,
        }
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        response = await self.client.post(
            url,
            json=payload,
            headers=headers or None,
            timeout=self.settings.timeout_seconds,
        )
        response.raise_for_status()

        try:
            result = response.json()
            choices = result.get("choices") or []
            if not choices:
                raise DecisionError("Invalid LLM response format")
            content = (choices[0].get("message") or {}).get("content", "").strip()
        except (ValueError, AttributeError, TypeError, KeyError) as e:
            raise DecisionError(f"Malformed LLM response: {e}") from e
        if not content:
            raise DecisionError("LLM returned empty response")
        return content

    def _parse_response(self, raw_response: str) -> Decision:
        """Extract the JSON decision from a model answer."""
        text = raw_response.strip()
        json_start = text.find("{")
        json_end = text.rfind("}") + 1
        if json_start == -1 or json_end == 0:
            raise DecisionError(f"No JSON found in response: {text[:100]}")

        try:
            data = json.loads(text[json_start:json_end])
        except json.JSONDecodeError as e:
            raise DecisionError(f"JSON parse error: {e}") from e
        if not isinstance(data, dict):
            raise DecisionError("Decision must be a JSON object")

        action = str(data.get("action", "")).lower()
        try:
            decision_action = DecisionAction(action)
        except ValueError as e:
            raise DecisionError(f"Invalid action: {action!r}") from e

        return Decision(decision_action, str(data.get("rationale", ""))[:200])

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
