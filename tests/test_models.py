"""Tests for record validation."""

import unittest

from ricgcw import create_app
from ricgcw.crud.models import (
    BOOLEAN,
    DATE,
    NUMBER,
    STRING,
    Contribution,
    Event,
    Field,
    Member,
    Transaction,
)
from ricgcw.errors import ValidationError


class FieldTestCase(unittest.TestCase):
    def test_numbers(self):
        field = Field(NUMBER)

        self.assertEqual(field.clean("amount", 12), 12)
        self.assertEqual(field.clean("amount", 12.5), 12.5)
        self.assertEqual(field.clean("amount", " 40 "), 40)
        self.assertEqual(field.clean("amount", "40.0"), 40.0)
        for bad in (True, "NaN", "inf", float("inf"), "ten", [1]):
            with self.subTest(value=bad), self.assertRaises(ValidationError):
                field.clean("amount", bad)

    def test_booleans_are_strict(self):
        field = Field(BOOLEAN)

        self.assertIs(field.clean("isOnline", False), False)
        with self.assertRaises(ValidationError):
            field.clean("isOnline", "false")

    def test_dates(self):
        field = Field(DATE)

        self.assertEqual(field.clean("date", "2025-03-01"), "2025-03-01")
        self.assertEqual(
            field.clean("date", "2025-03-01T10:00:00.000Z"), "2025-03-01T10:00:00.000Z"
        )
        self.assertEqual(field.clean("date", ""), "")
        with self.assertRaises(ValidationError):
            Field(DATE, required=True).clean("date", "")
        with self.assertRaises(ValidationError):
            field.clean("date", 20250301)

    def test_choices_return_canonical_value(self):
        field = Field(STRING, choices=("active", "inactive"))

        self.assertEqual(field.clean("status", " ACTIVE "), "active")
        with self.assertRaises(ValidationError) as ctx:
            field.clean("status", "asleep")
        self.assertIn("active, inactive", str(ctx.exception))

    def test_required_string(self):
        field = Field(STRING, required=True, strip=True)

        self.assertEqual(field.clean("name", "  Ama "), "Ama")
        with self.assertRaises(ValidationError):
            field.clean("name", "   ")
        with self.assertRaises(ValidationError):
            field.clean("name", None)


class RecordTestCase(unittest.TestCase):
    def setUp(self):
        app = create_app({"TESTING": True, "CHURCH_BRANCHES": ["Main"]})
        ctx = app.app_context()
        ctx.push()
        self.addCleanup(ctx.pop)

    def test_id_is_dropped(self):
        record = Event.validate({"id": "abc", "name": "Vigil", "date": "2025-04-18"})

        self.assertNotIn("id", record)

    def test_body_of_only_id_is_empty_on_update(self):
        with self.assertRaises(ValidationError):
            Event.validate({"id": "abc"}, partial=True)

    def test_partial_update_skips_required_check(self):
        self.assertEqual(
            Event.validate({"location": "Annex"}, partial=True), {"location": "Annex"}
        )

    def test_null_optional_field_is_dropped_on_create(self):
        record = Member.validate({"name": "Ama", "email": None})

        self.assertEqual(record, {"name": "Ama"})

    def test_null_clears_field_on_update(self):
        self.assertEqual(
            Member.validate({"email": None}, partial=True), {"email": None}
        )

    def test_branch_comes_from_config(self):
        self.assertEqual(Member.validate({"name": "Ama", "branch": "main"})["branch"], "Main")
        with self.assertRaises(ValidationError):
            Member.validate({"name": "Ama", "branch": "Kasoa"})

    def test_transaction_requires_amount_and_type(self):
        with self.assertRaises(ValidationError):
            Transaction.validate({"type": "expense"})
        with self.assertRaises(ValidationError):
            Transaction.validate({"amount": 10})

    def test_every_record_names_its_collection(self):
        self.assertEqual(Transaction.collection, "transactions")
        self.assertEqual(Event.collection, "events")
        self.assertEqual(Member.collection, "members")

    def test_contribution_defaults_to_tithe(self):
        self.assertEqual(Contribution.validate({"amount": 10})["type"], "tithe")
        self.assertNotIn("type", Contribution.validate({"amount": 10}, partial=True))


if __name__ == "__main__":
    unittest.main()
