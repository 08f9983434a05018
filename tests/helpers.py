"""Shared setup for API tests."""

import unittest
from unittest.mock import MagicMock, patch

from mockfirestore import MockFirestore

from ricgcw import create_app
from tests.conftest import patch_mockfirestore, run_immediately

ROUTE_MODULES = (
    "ricgcw.crud.routes",
    "ricgcw.members.routes",
)


class ApiTestCase(unittest.TestCase):
    """Runs the app against an in-memory Firestore."""

    def setUp(self):
        """Set up a test client backed by mockfirestore."""
        patch_mockfirestore()
        self.db = MockFirestore()
        self.mock_firestore_service = MagicMock()
        self.mock_firestore_service.client.return_value = self.db

        patchers = [
            patch(f"{module}.firestore", new=self.mock_firestore_service)
            for module in ROUTE_MODULES
        ]
        patchers.append(patch("firebase_admin.initialize_app"))
        patchers.append(
            patch("firebase_admin.firestore.transactional", new=run_immediately)
        )
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)

        self.app = create_app({"TESTING": True, "CHURCH_BRANCHES": ["Main", "Kasoa"]})
        self.client = self.app.test_client()

    def post_json(self, path, payload):
        return self.client.post(path, json=payload)

    def list_ids(self, path):
        response = self.client.get(path)
        self.assertEqual(response.status_code, 200)
        return {item["id"] for item in response.get_json()}
