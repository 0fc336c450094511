from __future__ import annotations

import json
from typing import Any

from openai import OpenAI

from booking_engine.application.exceptions import ClassifierContractError, ClassifierUpstreamError
from booking_engine.application.ports.classifier import ClassifierPort
from booking_engine.core.config import settings
from booking_engine.domain.entities.intent import ClassifierOutput, IntentAction
from booking_engine.infrastructure.llm.prompts import build_system_prompt

_ACTIONS = {action.value for action in IntentAction}


class OpenAIClassifier(ClassifierPort):
    """
    OpenAI-backed adapter implementing ClassifierPort.

    Contract guarantees:
    - classify returns ClassifierOutput with an action from IntentAction
    - Raises:
        ClassifierUpstreamError: networking/provider failures
        ClassifierContractError: invalid JSON or wrong schema/shape
    """

    def __init__(self, client: OpenAI | None = None) -> None:
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT_SECONDS)

    def classify(self, system_context: str, user_text: str) -> ClassifierOutput:
        text = self._call_text(
            model=settings.OPENAI_MODEL_CLASSIFY,
            system=build_system_prompt(system_context),
            user=f"Customer message:\n{user_text}",
            temperature=settings.OPENAI_TEMPERATURE_CLASSIFY,
        )
        data = _parse_json(text)

        if not isinstance(data, dict):
            raise ClassifierContractError("Classify: expected a JSON object.")

        action = data.get("action")
        if not isinstance(action, str) or action.strip().upper() not in _ACTIONS:
            raise ClassifierContractError(f"Classify: unknown action {action!r}.")

        response = data.get("response")
        if response is not None and not isinstance(response, str):
            raise ClassifierContractError("Classify: 'response' must be a string.")

        return ClassifierOutput(
            action=action.strip().upper(),
            response_text=(response or "").strip(),
            service_hint=_optional_str(data.get("service")),
            preferred_time_hint=_optional_str(data.get("preferred_time")),
        )

    def _call_text(self, model: str, system: str, user: str, temperature: float) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=temperature,
                max_tokens=400,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise ClassifierUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise ClassifierContractError("LLM returned empty response text.")

        return content


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except Exception:
        snippet = text[:200].replace("\n", " ")
        raise ClassifierContractError(f"Classify: invalid JSON. Snippet: {snippet!r}")


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip() and value.strip().lower() != "null":
        return value.strip()
    return None
