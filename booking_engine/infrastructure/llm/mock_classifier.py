from __future__ import annotations

from booking_engine.application.ports.classifier import ClassifierPort
from booking_engine.domain.entities.intent import ClassifierOutput


class ScriptedClassifier(ClassifierPort):
    """Replays queued outputs; a queued exception is raised instead of returned."""

    def __init__(self, outputs: list[ClassifierOutput | Exception] | None = None) -> None:
        self._outputs = list(outputs or [])
        self.calls: list[tuple[str, str]] = []

    def queue(self, output: ClassifierOutput | Exception) -> None:
        self._outputs.append(output)

    def classify(self, system_context: str, user_text: str) -> ClassifierOutput:
        self.calls.append((system_context, user_text))
        if not self._outputs:
            raise RuntimeError("ScriptedClassifier has no queued output")
        output = self._outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output
