from abc import ABC, abstractmethod

from booking_engine.domain.entities.intent import ClassifierOutput


class ClassifierPort(ABC):
    @abstractmethod
    def classify(self, system_context: str, user_text: str) -> ClassifierOutput:
        """
        Classify a customer message.

        Raises:
            ClassifierUpstreamError: provider unreachable or failing
            ClassifierContractError: provider answered with unusable output
        """
        raise NotImplementedError
