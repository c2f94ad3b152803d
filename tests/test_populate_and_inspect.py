#!/usr/bin/env python3
"""
Seeding and Inspection Script Tests

PURPOSE:
    Verify the catalog seed from cakes.csv, the admin bootstrap and the
    chronological timeline printed by the inspection CLI.

USAGE:
    pytest tests/test_populate_and_inspect.py
"""

import unittest
from datetime import date, timedelta

from cakeshop.app.lifecycle import OrderLifecycleManager
from cakeshop.data.models import Cake, UserRole
from cakeshop.data.populate_db import ensure_admin, populate_cakes
from cakeshop.scripts.inspect_db import format_timeline

from .helpers import ADDRESS, FIXED_NOW, cake_config, make_customer, make_session_factory


class TestPopulate(unittest.TestCase):

    def setUp(self):
        self.db = make_session_factory()()

    def tearDown(self):
        self.db.close()

    def test_seeds_catalog_once(self):
        added = populate_cakes(self.db)
        self.assertGreater(added, 0)
        self.assertEqual(self.db.query(Cake).count(), added)
        self.assertEqual(populate_cakes(self.db), 0)

    def test_seeded_cakes_have_allergen_lists(self):
        populate_cakes(self.db)
        for cake in self.db.query(Cake).all():
            self.assertIsInstance(cake.allergens, list)
            self.assertTrue(cake.available)

    def test_ensure_admin_promotes_existing_profile(self):
        customer = make_customer(self.db, "owner")
        self.assertEqual(customer.role, UserRole.customer)
        admin = ensure_admin(self.db, "owner")
        self.assertEqual(admin.id, customer.id)
        self.assertEqual(admin.role, UserRole.admin)

    def test_ensure_admin_creates_profile(self):
        admin = ensure_admin(self.db, "new-admin")
        self.assertEqual(admin.role, UserRole.admin)
        self.assertEqual(admin.external_id, "new-admin")


class TestTimeline(unittest.TestCase):

    def test_timeline_is_oldest_first(self):
        db = make_session_factory()()
        try:
            customer = make_customer(db)
            ticks = iter(FIXED_NOW + timedelta(minutes=i) for i in range(50))
            lifecycle = OrderLifecycleManager(db, clock=lambda: next(ticks), enforce_price=True)
            order = lifecycle.create_order(
                customer_id=customer.id,
                cake_config=cake_config(),
                delivery_date=date(2026, 10, 25),
                delivery_time=None,
                delivery_address=ADDRESS,
                special_instructions=None,
                total_amount=94,
            )
            lifecycle.confirm_payment(order.id, customer.id)
            lifecycle.append_event(order.id, "note", "Topper ordered", notes="gold")

            rows = format_timeline(db, order)
            self.assertEqual(len(rows), 3)
            self.assertIn("order_placed", rows[0])
            self.assertIn("payment_confirmed", rows[1])
            self.assertTrue(rows[2].endswith("note: Topper ordered (notes: gold)"))
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
