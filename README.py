"""
CAKESHOP: System Documentation
==============================

This module-style README documents the architecture, order lifecycle and
operational practices of the cake ordering backend. It can be imported to
surface sections programmatically or run to print them.

How to use this file
--------------------
- View in an editor for structured reading.
- Run `python README.py` to print the outline.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Order Lifecycle
4. Design Wizard
5. Pricing
6. Configuration & Environment
7. Testing Strategy
8. Security & PII Handling
9. Operations
"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    A backend for a single bakery selling custom cakes. Customers design a cake
    step by step, place an order with a server-checked price, pay manually by
    mobile money and follow the order's progress. Bakery staff triage orders by
    delivery urgency, move them through production and annotate them.
    """,
)


ARCHITECTURE = section(
    "2. Architecture",
    """
    app/
      - main.py: FastAPI app, CORS, error handlers, router wiring.
      - routers/: orders (customer), admin, catalog (public), design (wizard),
        occasions (customer dates worth a cake).
      - lifecycle.py: OrderLifecycleManager; every order write goes through it.
      - pricing.py: Pure price computation shared by the wizard and order creation.
      - auth.py: X-User-Id identity, profile bootstrap, admin role check.
      - session.py: Design sessions in Redis (TTL) or process memory,
        both expiring after DESIGN_SESSION_TTL.
      - payments.py: Airtel Money instructions for a placed order.
      - config.py / errors.py: Env-driven settings and the error taxonomy.

    agents/
      - design_wizard.py: The design state machine (stages, actions, transitions).
      - design_agent.py: Presents the wizard to an assistant: stage instructions
        and only the actions legal in the current stage.

    data/
      - models.py/database.py: SQLAlchemy models and session management.
      - populate_db.py: Seed the catalog from raw/cakes.csv and bootstrap an admin.

    scripts/
      - inspect_db.py: Print profiles, orders and each order's event timeline.
    """,
)


ORDER_LIFECYCLE = section(
    "3. Order Lifecycle",
    """
    - Statuses: pending, confirmed, preparing, baking, decorating, ready,
      out_for_delivery, delivered, cancelled. Delivered and cancelled are final.
    - Payment: pending, paid, refunded, failed.
    - Creation: pending/pending plus one `order_placed` event.
    - Customer payment confirmation: pending -> paid (status pending -> confirmed).
      A second confirmation answers 409.
    - Admin changes: status and payment status together in one transaction,
      each with its own audit event. STRICT_STATUS_TRANSITIONS=true limits
      status to the next production step or cancellation.
    - Orders carry a version counter; stale writers get 409 instead of
      overwriting a concurrent change.
    """,
)


DESIGN_WIZARD = section(
    "4. Design Wizard",
    """
    welcome -> flavor_selection -> size_and_shape -> layers_and_tiers
      -> customization -> preview -> order_complete
    Each stage lists the actions it accepts; `restart` is available everywhere
    except welcome. Missing action parameters produce a clarification question
    instead of an error.
    """,
)


PRICING = section(
    "5. Pricing",
    """
    price = round_half_up(base[size] * flavor * layers * tiers)
    - Base: 4" K45, 6" K65, 8" K85, 10" K120 (unknown size uses 6").
    - Flavor: Vanilla 1.0, Strawberry/Chocolate/Mint/Banana 1.1, Choco-mint 1.2, Fruit 1.3.
    - More than one layer: x1.2. More than one tier: x1.3.
    Orders whose total_amount differs are rejected (ENFORCE_SERVER_PRICE).
    """,
)


CONFIG_ENV = section(
    "6. Configuration & Environment",
    """
    .env (python-dotenv):
      DATABASE_URL, USE_REDIS, REDIS_HOST/PORT/DB, DESIGN_SESSION_TTL, LOG_LEVEL,
      ENFORCE_SERVER_PRICE, STRICT_STATUS_TRANSITIONS, BAKERY_TIMEZONE,
      BAKERY_NAME, PAYMENT_METHOD, PAYMENT_PHONE_NUMBER, CURRENCY,
      ADMIN_EXTERNAL_ID, CORS_ORIGINS
    """,
)


TESTING = section(
    "7. Testing Strategy",
    """
    - unittest test cases, run with pytest: `pytest tests/`.
    - Every test builds its own in-memory SQLite schema; no Redis needed.
    - API tests use FastAPI's TestClient with dependency overrides.
    """,
)


SECURITY = section(
    "8. Security & PII Handling",
    """
    - Phone numbers and e-mail addresses are masked before logging (utils/security.py).
    - Orders owned by another customer answer 404, never 403.
    - Admin role is read from the store on every request.
    """,
)


OPERATIONS = section(
    "9. Operations",
    """
    - Seed: `python -m cakeshop.data.populate_db`
    - Serve: `uvicorn cakeshop.app.main:app --reload`
    - Inspect: `python -m cakeshop.scripts.inspect_db [--order DB12345678]`
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            ARCHITECTURE,
            ORDER_LIFECYCLE,
            DESIGN_WIZARD,
            PRICING,
            CONFIG_ENV,
            TESTING,
            SECURITY,
            OPERATIONS,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()
