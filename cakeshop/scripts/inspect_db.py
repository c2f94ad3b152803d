#!/usr/bin/env python3
"""
Inspect the cake order database: print profiles, orders and each order's
event history in chronological order.

Usage:
  python -m cakeshop.scripts.inspect_db
  python -m cakeshop.scripts.inspect_db --order DB12345678

Notes:
- Uses the existing SQLAlchemy session and models.
- Safe read-only inspection; makes no writes.
"""

from __future__ import annotations

import argparse
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..data.database import SessionLocal
from ..data.models import Order, OrderEvent, UserProfile
from ..utils.security import mask_pii


def line(ch: str = "-", width: int = 60) -> str:
    return ch * width


def format_timeline(session: Session, order: Order) -> List[str]:
    """One line per event, oldest first."""
    events = (
        session.query(OrderEvent)
        .filter(OrderEvent.order_id == order.id)
        .order_by(OrderEvent.created_at.asc(), OrderEvent.id.asc())
        .all()
    )
    rows = []
    for e in events:
        when = e.created_at.strftime("%Y-%m-%d %H:%M:%S") if e.created_at else "?"
        row = f"{when}  {e.event_type}"
        if e.description:
            row += f": {e.description}"
        if e.notes:
            row += f" (notes: {e.notes})"
        rows.append(row)
    return rows


def print_profiles(session: Session):
    print(line("="))
    print("User profiles")
    print(line("="))
    profiles = session.query(UserProfile).order_by(UserProfile.created_at).all()
    print(f"Total profiles: {len(profiles)}")
    for p in profiles:
        print(f"- {p.id} {p.full_name} | role={p.role.value} | email={mask_pii(p.email) or '(none)'}")
    print()


def print_orders(session: Session, order_number: Optional[str] = None):
    print(line("="))
    print("Orders (with event history)")
    print(line("="))
    query = session.query(Order).order_by(Order.created_at)
    if order_number:
        query = query.filter(Order.order_number == order_number)
    orders = query.all()
    print(f"Total orders: {len(orders)}")
    for o in orders:
        print(
            f"\nOrder {o.order_number} | customer_id={o.customer_id} | status={o.status.value} "
            f"| payment={o.payment_status.value} | total={o.total_amount:.0f}"
        )
        print(f"  Delivery: {o.delivery_date} {o.delivery_time or ''}".rstrip())
        print(f"  Cake: {o.cake_config}")
        for row in format_timeline(session, o):
            print(f"    {row}")
    print()


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Print orders and their event history")
    parser.add_argument("--order", help="only show the order with this order number")
    args = parser.parse_args(argv)

    session = SessionLocal()
    try:
        print(f"DB Inspection at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        if not args.order:
            print_profiles(session)
        print_orders(session, args.order)
        print(line("="))
        print("End of database inspection")
        print(line("="))
    finally:
        session.close()


if __name__ == "__main__":
    main()
