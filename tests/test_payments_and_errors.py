#!/usr/bin/env python3
"""
Payment Instruction and Error Mapping Tests

USAGE:
    pytest tests/test_payments_and_errors.py
"""

import unittest
from types import SimpleNamespace

from cakeshop.app.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from cakeshop.app.payments import build_payment_instructions
from cakeshop.utils.security import mask_pii


class TestPaymentInstructions(unittest.TestCase):

    def test_reference_and_amount(self):
        order = SimpleNamespace(order_number="DB12345678", total_amount=112.0)
        payment = build_payment_instructions(order)
        self.assertEqual(payment.method, "airtel_money")
        self.assertEqual(payment.reference, "DB12345678")
        self.assertEqual(payment.amount, 112.0)
        self.assertIn("Enter amount: ZMW 112", payment.instructions)
        self.assertIn("Enter recipient number: 0974147414", payment.instructions)


class TestErrors(unittest.TestCase):

    def test_status_codes(self):
        expected = {
            ValidationError: 400,
            AuthenticationError: 401,
            AuthorizationError: 403,
            NotFoundError: 404,
            ConflictError: 409,
            PersistenceError: 500,
        }
        for cls, code in expected.items():
            with self.subTest(error=cls.__name__):
                self.assertEqual(cls("boom").status_code, code)

    def test_validation_error_body_lists_fields(self):
        body = ValidationError("Missing required fields: size", ["cake_config.size"]).to_dict()
        self.assertEqual(body, {"success": False, "error": "Missing required fields: size", "fields": ["cake_config.size"]})

    def test_other_errors_have_plain_body(self):
        self.assertEqual(ConflictError("Payment already confirmed").to_dict(), {"success": False, "error": "Payment already confirmed"})


class TestMaskPii(unittest.TestCase):

    def test_masks_phone_and_email(self):
        masked = mask_pii({"street": "Plot 12", "phone": "0977 123 456", "email": "a.b@example.com"})
        self.assertNotIn("0977", masked)
        self.assertNotIn("example.com", masked)
        self.assertIn("Plot 12", masked)

    def test_none(self):
        self.assertEqual(mask_pii(None), "")


if __name__ == "__main__":
    unittest.main()
