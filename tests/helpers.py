"""Shared fixtures: an isolated in-memory database per test and a fixed clock."""
from datetime import datetime

import pytz
from sqlalchemy.orm import sessionmaker

from cakeshop.app.auth import find_or_create_profile
from cakeshop.data.database import create_tables, make_engine

LUSAKA = pytz.timezone("Africa/Lusaka")
FIXED_NOW = LUSAKA.localize(datetime(2026, 10, 19, 10, 0, 0))


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_session_factory(url: str = "sqlite://"):
    """Fresh schema on a fresh engine; nothing is shared between tests."""
    engine = make_engine(url)
    create_tables(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def cake_config(**overrides):
    config = {"flavor": "Chocolate", "size": '8"', "shape": "Round", "layers": 1, "tiers": 1}
    config.update(overrides)
    return config


ADDRESS = {"street": "Plot 12, Great East Road", "city": "Lusaka", "phone": "0977123456"}


def make_customer(db, external_id="customer-1", full_name="Test Customer"):
    return find_or_create_profile(db, external_id, full_name, f"{external_id}@example.com")
