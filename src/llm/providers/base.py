from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

class LLMProvider(ABC):
    @abstractmethod
    def generate(
        self,
        *,
        system: str,
        user: str,
        temperature: float = 0.1,
        model: Optional[str] = None,
    ) -> str:
        """
        Must return the model output as TEXT (JSON is parsed/validated by the caller).
        Network, credential and timeout problems are raised, not swallowed.
        """
        raise NotImplementedError
