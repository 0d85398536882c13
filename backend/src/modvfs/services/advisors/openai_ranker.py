"""LLM-backed load-order suggestions.

Uses OpenAI's Responses API with a strict JSON schema.  The model acts as a
load-order optimiser: it receives each mod's id, name and category and answers
with the ids in the order they should load.  Entries it returns as names rather
than ids are resolved later by the reorder engine's name fallback.
"""

import json
import logging
import re
from collections.abc import Sequence

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from modvfs.config import Settings
from modvfs.errors import HintResolutionFailedError
from modvfs.schemas.hints import RankingHints
from modvfs.schemas.mod import Mod
from modvfs.services.advisors.base import RankingAdvisor, register_advisor

logger = logging.getLogger(__name__)

_MAX_OUTPUT_TOKENS = 2048
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

_SYSTEM_PROMPT = """\
You are a load-order optimisation tool for a PC game mod manager. Mods that load
later overwrite the files of mods that load earlier.

Rules:
1. Official DLC and unofficial bug-fix patches load first.
2. Body and creature meshes load before the textures that skin them.
3. Large environment or texture overhauls load before small, targeted texture
   replacers so the specific replacers win.
4. Script mods load after content they extend.
5. Keep the existing relative order when no rule applies.

Return JSON with "order": every mod id, first-loaded first.\
"""

_RESPONSE_SCHEMA = {
    "type": "json_schema",
    "name": "load_order_suggestion",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "order": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Mod ids, first-loaded first",
            },
        },
        "required": ["order"],
        "additionalProperties": False,
    },
}


class LoadOrderSuggestion(BaseModel):
    order: list[str]


def _build_user_prompt(mods: Sequence[Mod]) -> str:
    lines = [f"Current load order ({len(mods)} mods, first-loaded first):"]
    for m in mods:
        state = "" if m.enabled else " (disabled)"
        lines.append(f"  - id={m.id} | {m.name} {m.version} | category: {m.category.value}{state}")
    return "\n".join(lines)


def _parse_output(raw: str) -> LoadOrderSuggestion:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        # Model may wrap JSON in markdown fences
        m = _JSON_OBJECT_RE.search(raw)
        if not m:
            raise HintResolutionFailedError(f"No JSON in model output: {raw[:200]}") from None
        try:
            data = json.loads(m.group())
        except json.JSONDecodeError as exc:
            raise HintResolutionFailedError("Model output is not valid JSON") from exc
    try:
        return LoadOrderSuggestion.model_validate(data)
    except ValidationError as exc:
        raise HintResolutionFailedError(f"Model output has the wrong shape: {exc}") from exc


class OpenAIRankingAdvisor:
    name = "openai"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o",
        client: OpenAI | None = None,
    ) -> None:
        if client is None and not api_key:
            raise ValueError("OpenAI advisor requires an API key")
        self._client = client or OpenAI(api_key=api_key)
        self._model = model

    def suggest(self, mods: Sequence[Mod]) -> RankingHints:
        try:
            response = self._client.responses.create(
                model=self._model,
                instructions=_SYSTEM_PROMPT,
                input=_build_user_prompt(mods),
                text={"format": _RESPONSE_SCHEMA},
                max_output_tokens=_MAX_OUTPUT_TOKENS,
            )
        except OpenAIError as exc:
            logger.warning("OpenAI load-order request failed: %s", exc)
            raise HintResolutionFailedError(f"OpenAI request failed: {exc}") from exc

        suggestion = _parse_output(response.output_text)
        try:
            return RankingHints(explicit_order=suggestion.order)
        except ValidationError as exc:
            raise HintResolutionFailedError(f"Model suggested an unusable order: {exc}") from exc


@register_advisor("openai")
def _openai_advisor(settings: Settings) -> RankingAdvisor:
    return OpenAIRankingAdvisor(settings.openai_api_key, model=settings.openai_model)
