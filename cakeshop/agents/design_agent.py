"""Design Agent: presents the design wizard to a conversational assistant.

The agent reads the current wizard state from the session store and offers
only the actions the wizard allows in that stage, together with the stage
instructions the assistant should follow. All state changes go through
``DesignWizard.apply``.
"""
import uuid
from typing import Any, Dict, Optional

from .base_agent import BaseAgent
from .design_wizard import ActionSpec, DesignState, DesignWizard, Stage
from ..app.errors import NotFoundError
from ..app.pricing import describe_price
from ..app.session import SessionManager
from ..schemas.io_models import AgentResult
from ..utils.logger import get_logger

logger = get_logger()

STAGE_INSTRUCTIONS = {
    Stage.welcome: (
        "CURRENT STAGE: Welcome & Occasion Discovery\n"
        "Warmly greet the customer and ask what occasion they are celebrating and when they need the cake. "
        "Once you understand their occasion, call 'proceed_to_flavor'."
    ),
    Stage.flavor_selection: (
        "CURRENT STAGE: Flavor Selection\n"
        "Help the customer choose from: Vanilla, Strawberry, Chocolate, Choco-mint, Mint, Banana, Fruit. "
        "Recommend flavors that suit their occasion, then call 'select_flavor'."
    ),
    Stage.size_and_shape: (
        "CURRENT STAGE: Size and Shape Selection\n"
        "Sizes: 4\" (serves 2-4) K45, 6\" (serves 6-8) K65, 8\" (serves 10-12) K85, 10\" (serves 15-20) K120. "
        "Shapes: Round, Square, Heart. Ask about guest count, then call 'select_size_and_shape'."
    ),
    Stage.layers_and_tiers: (
        "CURRENT STAGE: Layers and Tiers Design\n"
        "Layers (1-3) add flavor variety; tiers (1-3) add height. Any extra layers add 20%, any extra tiers 30%. "
        "Call 'select_structure' when decided."
    ),
    Stage.customization: (
        "CURRENT STAGE: Customization & Personal Touches\n"
        "Ask about a message for the cake, color preferences and decorations. "
        "When ready, call 'finalize_design'."
    ),
    Stage.preview: (
        "CURRENT STAGE: Order Completion\n"
        "The customer has seen their preview. Confirm the delivery date and any notes, "
        "then call 'proceed_to_order_placement'."
    ),
    Stage.order_complete: (
        "CURRENT STAGE: Ready to Order\n"
        "The design is complete. Direct the customer to place the order with the design and price shown."
    ),
}


def _action_facts(spec: ActionSpec) -> Dict[str, Any]:
    return {
        "name": spec.name,
        "description": spec.description,
        "parameters": [
            {
                "name": p.name,
                "type": p.type,
                "description": p.description,
                "required": p.required,
                **({"enum": list(p.enum)} if p.enum else {}),
            }
            for p in spec.parameters
        ],
    }


class DesignAgent(BaseAgent):
    name = "design"

    def __init__(self, session_manager: Optional[SessionManager] = None, wizard: Optional[DesignWizard] = None):
        self.sessions = session_manager or SessionManager()
        self.wizard = wizard or DesignWizard()

    def start(self, session_id: Optional[str] = None) -> AgentResult:
        session_id = session_id or str(uuid.uuid4())
        created = self.sessions.create_session(session_id, DesignState().to_dict())
        if created:
            logger.info(f"[DESIGN] Started design session {session_id}")
        result = self.describe(session_id)
        result.facts["created"] = created
        return result

    def describe(self, session_id: str) -> AgentResult:
        state = self._load(session_id)
        return self._ok("design_state", self._state_facts(session_id, state))

    def handle(self, session_id: str, action: str, params: Dict[str, Any]) -> AgentResult:
        params = params or {}
        state = self._load(session_id)

        # Illegal actions raise ConflictError; missing details are asked for instead
        spec = self.wizard.action_for(state.stage, action)
        missing = spec.missing_params(params)
        if missing:
            question = f"To {spec.description.lower()}, I still need: {', '.join(missing)}."
            facts = self._state_facts(session_id, state)
            facts["missing"] = missing
            return self._clarify(action, question, facts)

        next_state, message = self.wizard.apply(state, action, params)
        session = self.sessions.get_session(session_id) or {}
        session.update(next_state.to_dict())
        self.sessions.save_session(session_id, session)
        self.sessions.add_message(session_id, "assistant", message)
        logger.info(f"[DESIGN] Session {session_id}: {action} -> {next_state.stage.value}")

        facts = self._state_facts(session_id, next_state)
        facts["message"] = message
        return self._ok(action, facts)

    def end(self, session_id: str) -> bool:
        return self.sessions.clear_session(session_id)

    def _load(self, session_id: str) -> DesignState:
        data = self.sessions.get_session(session_id)
        if data is None:
            raise NotFoundError("Design session not found")
        return DesignState.from_dict(data)

    def _state_facts(self, session_id: str, state: DesignState) -> Dict[str, Any]:
        facts = {
            "session_id": session_id,
            **state.to_dict(),
            "instructions": STAGE_INSTRUCTIONS[state.stage],
            "actions": [_action_facts(a) for a in self.wizard.allowed_actions(state.stage)],
        }
        if state.price is not None:
            facts["price_breakdown"] = describe_price(state.config)
        return facts
