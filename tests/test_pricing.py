#!/usr/bin/env python3
"""
Pricing Tests

PURPOSE:
    Check the price tables, the defaults used for incomplete designs and the
    step behaviour of the layer and tier multipliers.

TEST COVERAGE:
    - Table fidelity for known configurations
    - Defaults when size or flavor is missing
    - Determinism across dicts and CakeConfiguration models
    - Half-up rounding
    - Human-readable breakdown lines

USAGE:
    pytest tests/test_pricing.py
"""

import unittest

from cakeshop.app.pricing import compute_price, describe_price, price_breakdown
from cakeshop.schemas.order_models import CakeConfiguration, CakeSize, Flavor


class TestComputePrice(unittest.TestCase):

    def test_chocolate_eight_inch(self):
        self.assertEqual(compute_price({"size": '8"', "flavor": "Chocolate", "layers": 1, "tiers": 1}), 94)

    def test_fruit_ten_inch_layers_and_tiers(self):
        self.assertEqual(compute_price({"size": '10"', "flavor": "Fruit", "layers": 3, "tiers": 2}), 243)

    def test_missing_size_uses_six_inch_base(self):
        self.assertEqual(compute_price({"flavor": "Vanilla"}), 65)

    def test_missing_flavor_uses_plain_multiplier(self):
        self.assertEqual(compute_price({"size": '6"'}), 65)

    def test_unknown_values_fall_back_to_defaults(self):
        self.assertEqual(compute_price({"size": '12"', "flavor": "Lemon"}), 65)
        self.assertEqual(compute_price({"size": ['6"'], "flavor": {"name": "Fruit"}}), 65)
        self.assertEqual(compute_price({"size": '6"', "layers": float("inf"), "tiers": float("nan")}), 65)

    def test_enum_values_in_a_dict(self):
        self.assertEqual(compute_price({"size": CakeSize.eight_inch, "flavor": Flavor.chocolate}), 94)

    def test_layers_are_a_step_multiplier(self):
        two = compute_price({"size": '6"', "flavor": "Vanilla", "layers": 2})
        three = compute_price({"size": '6"', "flavor": "Vanilla", "layers": 3})
        self.assertEqual(two, 78)
        self.assertEqual(two, three)

    def test_tiers_are_a_step_multiplier(self):
        self.assertEqual(compute_price({"size": '4"', "flavor": "Vanilla", "tiers": 2}), 59)
        self.assertEqual(compute_price({"size": '4"', "flavor": "Vanilla", "tiers": 3}), 59)

    def test_rounds_half_up(self):
        # 45 * 1.1 = 49.5
        self.assertEqual(compute_price({"size": '4"', "flavor": "Strawberry"}), 50)

    def test_model_and_dict_price_the_same(self):
        as_dict = {"size": '10"', "flavor": "Choco-mint", "layers": 2, "tiers": 1}
        model = CakeConfiguration(size=CakeSize.ten_inch, flavor=Flavor.choco_mint, layers=2)
        self.assertEqual(compute_price(as_dict), compute_price(model))

    def test_deterministic(self):
        config = {"size": '8"', "flavor": "Mint", "layers": 2, "tiers": 2}
        self.assertEqual({compute_price(config) for _ in range(10)}, {compute_price(config)})


class TestPriceBreakdown(unittest.TestCase):

    def test_breakdown_factors(self):
        b = price_breakdown({"size": '10"', "flavor": "Fruit", "layers": 3, "tiers": 2})
        self.assertEqual(b.base_price, 120)
        self.assertEqual(b.flavor_multiplier, 1.3)
        self.assertEqual(b.layer_multiplier, 1.2)
        self.assertEqual(b.tier_multiplier, 1.3)
        self.assertEqual(b.total, 243)

    def test_describe_price(self):
        lines = describe_price({"size": '8"', "flavor": "Chocolate", "layers": 2})
        self.assertEqual(lines["base"], "K85")
        self.assertEqual(lines["flavor"], "+10%")
        self.assertEqual(lines["layers"], "+20%")
        self.assertEqual(lines["tiers"], "+0%")
        self.assertEqual(lines["total"], "K112")


if __name__ == "__main__":
    unittest.main()
