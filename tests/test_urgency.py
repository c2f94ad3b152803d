#!/usr/bin/env python3
"""
Urgency Classification Tests

PURPOSE:
    Verify the calendar-day boundaries used to triage orders on the admin
    dashboard.

USAGE:
    pytest tests/test_urgency.py
"""

import unittest
from datetime import date, datetime, timedelta
from types import SimpleNamespace

from cakeshop.app.lifecycle import URGENCY_RANK, Urgency, get_urgency

from .helpers import FIXED_NOW


def order_due(delta_days):
    return SimpleNamespace(delivery_date=FIXED_NOW.date() + timedelta(days=delta_days))


class TestGetUrgency(unittest.TestCase):

    def test_boundaries(self):
        cases = {
            -3: Urgency.overdue,
            -1: Urgency.overdue,
            0: Urgency.today,
            1: Urgency.tomorrow,
            2: Urgency.urgent,
            3: Urgency.normal,
            30: Urgency.normal,
        }
        for delta, expected in cases.items():
            with self.subTest(delta=delta):
                self.assertEqual(get_urgency(order_due(delta), FIXED_NOW), expected)

    def test_time_of_day_is_ignored(self):
        late_evening = FIXED_NOW.replace(hour=23, minute=59)
        self.assertEqual(get_urgency(order_due(0), late_evening), Urgency.today)
        self.assertEqual(get_urgency(order_due(1), late_evening), Urgency.tomorrow)

    def test_accepts_dicts_and_iso_strings(self):
        self.assertEqual(get_urgency({"delivery_date": "2026-10-20"}, FIXED_NOW), Urgency.tomorrow)
        self.assertEqual(get_urgency({"delivery_date": datetime(2026, 10, 18, 9)}, date(2026, 10, 19)), Urgency.overdue)

    def test_missing_delivery_date_is_normal(self):
        self.assertEqual(get_urgency({}, FIXED_NOW), Urgency.normal)

    def test_rank_puts_overdue_first(self):
        ranked = sorted(Urgency, key=URGENCY_RANK.get)
        self.assertEqual(ranked[0], Urgency.overdue)
        self.assertEqual(ranked[-1], Urgency.normal)


if __name__ == "__main__":
    unittest.main()
