"""BaseAgent interface for all agents."""
from abc import ABC, abstractmethod
from typing import Dict, Any
from ..schemas.io_models import AgentResult
from ..utils.logger import get_logger

logger = get_logger()

class BaseAgent(ABC):
    name: str = "base"

    @abstractmethod
    def handle(self, session_id: str, action: str, params: Dict[str, Any]) -> AgentResult:
        """Return structured facts; no tone or final prose here."""
        ...

    def _ok(self, intent: str, facts: Dict[str, Any], **extras) -> AgentResult:
        return AgentResult(agent=self.name, intent=intent, facts=facts, **extras)

    def _clarify(self, intent: str, question: str, facts: Dict[str, Any] = None) -> AgentResult:
        logger.info(f"[CLARIFY] for intent '{intent}': {question}")
        return AgentResult(
            agent=self.name,
            intent=intent,
            facts=facts or {},
            needs_clarification=True,
            clarification_question=question,
        )
