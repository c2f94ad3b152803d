"""Cake design wizard as an explicit state machine.

The wizard walks a customer through a fixed sequence of stages. Each stage
has a table of named actions; an action is only legal in the stage that lists
it, and applying it yields the next state. Nothing here talks to a store or
renders text for a chat window: that is ``design_agent``'s job.
"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import dateparser
from pydantic import ValidationError as PydanticValidationError

from ..app.errors import ConflictError, ValidationError
from ..app.lifecycle import bakery_now
from ..app.pricing import compute_price
from ..schemas.order_models import CakeConfiguration, CakeShape, CakeSize, Flavor


class Stage(str, Enum):
    welcome = "welcome"
    flavor_selection = "flavor_selection"
    size_and_shape = "size_and_shape"
    layers_and_tiers = "layers_and_tiers"
    customization = "customization"
    preview = "preview"
    order_complete = "order_complete"


@dataclass(frozen=True)
class ParamSpec:
    name: str
    type: str
    description: str
    required: bool = True
    enum: Optional[Tuple[Any, ...]] = None


@dataclass(frozen=True)
class ActionSpec:
    name: str
    description: str
    target: Stage
    parameters: Tuple[ParamSpec, ...] = ()

    def missing_params(self, params: Dict[str, Any]) -> List[str]:
        return [p.name for p in self.parameters if p.required and params.get(p.name) in (None, "")]


@dataclass(frozen=True)
class DesignState:
    stage: Stage = Stage.welcome
    config: Dict[str, Any] = field(default_factory=dict)
    price: Optional[int] = None
    delivery_date: Optional[str] = None
    special_notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "config": dict(self.config),
            "price": self.price,
            "delivery_date": self.delivery_date,
            "special_notes": self.special_notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DesignState":
        return cls(
            stage=Stage(data.get("stage", Stage.welcome.value)),
            config=dict(data.get("config") or {}),
            price=data.get("price"),
            delivery_date=data.get("delivery_date"),
            special_notes=data.get("special_notes"),
        )


RESTART = ActionSpec("restart", "Discard the design so far and start over", Stage.welcome)

TRANSITIONS: Dict[Stage, Dict[str, ActionSpec]] = {
    Stage.welcome: {
        "proceed_to_flavor": ActionSpec(
            "proceed_to_flavor",
            "Move to flavor selection after understanding the customer's occasion",
            Stage.flavor_selection,
            (ParamSpec("occasion", "string", "The special occasion for the cake"),),
        ),
    },
    Stage.flavor_selection: {
        "select_flavor": ActionSpec(
            "select_flavor",
            "Select a cake flavor and proceed to size/shape selection",
            Stage.size_and_shape,
            (
                ParamSpec("flavor", "string", "The selected cake flavor", enum=tuple(f.value for f in Flavor)),
                ParamSpec("reasoning", "string", "Why this flavor suits the occasion", required=False),
            ),
        ),
    },
    Stage.size_and_shape: {
        "select_size_and_shape": ActionSpec(
            "select_size_and_shape",
            "Select cake size and shape, then proceed to structure design",
            Stage.layers_and_tiers,
            (
                ParamSpec("size", "string", "The cake size", enum=tuple(s.value for s in CakeSize)),
                ParamSpec("shape", "string", "The cake shape", enum=tuple(s.value for s in CakeShape)),
                ParamSpec("guest_count", "number", "Number of guests to serve", required=False),
            ),
        ),
    },
    Stage.layers_and_tiers: {
        "select_structure": ActionSpec(
            "select_structure",
            "Select layers and tiers, then proceed to customization",
            Stage.customization,
            (
                ParamSpec("layers", "number", "Number of cake layers", enum=(1, 2, 3)),
                ParamSpec("tiers", "number", "Number of cake tiers", enum=(1, 2, 3)),
            ),
        ),
    },
    Stage.customization: {
        "finalize_design": ActionSpec(
            "finalize_design",
            "Finalize the cake design and show the preview",
            Stage.preview,
            (
                ParamSpec("message", "string", "Special message for the cake", required=False),
                ParamSpec("colors", "string", "Color preferences, comma separated", required=False),
                ParamSpec("decorations", "string", "Special decorations, comma separated", required=False),
            ),
        ),
    },
    Stage.preview: {
        "proceed_to_order_placement": ActionSpec(
            "proceed_to_order_placement",
            "Proceed to final order placement",
            Stage.order_complete,
            (
                ParamSpec("delivery_date", "string", "Requested delivery date"),
                ParamSpec("special_notes", "string", "Any special delivery or preparation notes", required=False),
            ),
        ),
    },
    Stage.order_complete: {},
}


def _split(value) -> List[str]:
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


class DesignWizard:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or bakery_now

    def allowed_actions(self, stage: Stage) -> List[ActionSpec]:
        actions = list(TRANSITIONS[stage].values())
        if stage != Stage.welcome:
            actions.append(RESTART)
        return actions

    def action_for(self, stage: Stage, action: str) -> ActionSpec:
        for spec in self.allowed_actions(stage):
            if spec.name == action:
                return spec
        allowed = ", ".join(a.name for a in self.allowed_actions(stage)) or "none"
        raise ConflictError(f"Action '{action}' is not available at stage '{stage.value}' (allowed: {allowed})")

    def apply(self, state: DesignState, action: str, params: Dict[str, Any]) -> Tuple[DesignState, str]:
        """Return the next state and a short confirmation for the customer."""
        spec = self.action_for(state.stage, action)
        missing = spec.missing_params(params)
        if missing:
            raise ValidationError(f"Missing parameters: {', '.join(missing)}", missing)

        if spec is RESTART:
            return DesignState(), "Let's start again. What are we celebrating?"

        handler = getattr(self, f"_{spec.name}")
        next_state, message = handler(state, params)
        return replace(next_state, stage=spec.target), message

    # --- action handlers ---

    def _proceed_to_flavor(self, state: DesignState, params: Dict[str, Any]):
        occasion = str(params["occasion"]).strip()
        config = self._merge(state, occasion=occasion)
        return replace(state, config=config), (
            f"Perfect! A {occasion} deserves a truly special cake. Now let's choose the flavor."
        )

    def _select_flavor(self, state: DesignState, params: Dict[str, Any]):
        config = self._merge(state, flavor=params["flavor"])
        reasoning = params.get("reasoning")
        message = f"Excellent choice! {config['flavor']}"
        message += f" is {reasoning}." if reasoning else " it is."
        return replace(state, config=config), message + " How many people will be enjoying the cake?"

    def _select_size_and_shape(self, state: DesignState, params: Dict[str, Any]):
        config = self._merge(
            state,
            size=params["size"],
            shape=params["shape"],
            servings=params.get("guest_count"),
        )
        guests = f" for your {config['servings']} guests" if config.get("servings") else ""
        return self._priced(state, config), (
            f"A {config['size']} {config['shape']} cake{guests}. Now let's pick layers and tiers."
        )

    def _select_structure(self, state: DesignState, params: Dict[str, Any]):
        config = self._merge(state, layers=params["layers"], tiers=params["tiers"])
        return self._priced(state, config), (
            f"{config['layers']} layer(s) with {config['tiers']} tier(s). Now for the personal touches."
        )

    def _finalize_design(self, state: DesignState, params: Dict[str, Any]):
        customization = {
            "message": params.get("message") or None,
            "colors": _split(params.get("colors")),
            "decorations": _split(params.get("decorations")),
        }
        config = self._merge(state, customization=customization)
        next_state = self._priced(state, config)
        return next_state, f"Your design is ready. Total: K{next_state.price}. Ready to place your order?"

    def _proceed_to_order_placement(self, state: DesignState, params: Dict[str, Any]):
        delivery = self.parse_delivery_date(params["delivery_date"])
        notes = params.get("special_notes") or None
        return replace(state, delivery_date=delivery.isoformat(), special_notes=notes), (
            f"Your {state.config.get('flavor', '')} cake is ready to order for {delivery.isoformat()}. "
            f"Total: K{state.price}."
        )

    # --- helpers ---

    def parse_delivery_date(self, text: str) -> date:
        now = self.clock()
        parsed = dateparser.parse(
            str(text),
            settings={"PREFER_DATES_FROM": "future", "RELATIVE_BASE": now.replace(tzinfo=None)},
        )
        if parsed is None:
            raise ValidationError(f"Could not understand delivery date '{text}'", ["delivery_date"])
        if parsed.date() < now.date():
            raise ValidationError("Delivery date is in the past", ["delivery_date"])
        return parsed.date()

    @staticmethod
    def _merge(state: DesignState, **changes) -> Dict[str, Any]:
        """Validate the updated configuration and return it in its stored (JSON) form."""
        merged = dict(state.config)
        merged.update(changes)
        try:
            config = CakeConfiguration.model_validate(merged)
        except PydanticValidationError as e:
            fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
            raise ValidationError("Invalid cake design", fields) from e
        return config.model_dump(mode="json", exclude_none=True)

    @staticmethod
    def _priced(state: DesignState, config: Dict[str, Any]) -> DesignState:
        return replace(state, config=config, price=compute_price(config))
