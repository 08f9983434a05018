"""Tests for resource links and uploads."""

import io
import unittest
from unittest.mock import patch

from tests.helpers import ApiTestCase


class ResourceRoutesTestCase(ApiTestCase):
    """Resources are stored like any collection, with optional file uploads."""

    def setUp(self):
        super().setUp()
        patcher = patch("ricgcw.resources.services.storage")
        self.mock_storage = patcher.start()
        self.addCleanup(patcher.stop)
        self.mock_blob = self.mock_storage.bucket.return_value.blob.return_value
        self.mock_blob.public_url = "https://storage.example.com/sermon.pdf"

    def upload(self, **form):
        return self.client.post(
            "/resources", data=form, content_type="multipart/form-data"
        )

    def test_json_link_resource(self):
        response = self.post_json(
            "/resources",
            {"title": "Sunday Sermon", "type": "audio", "link": "https://example.com/a"},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["link"], "https://example.com/a")
        self.mock_storage.bucket.assert_not_called()

    def test_file_upload(self):
        response = self.upload(
            title="Sermon Notes",
            file=(io.BytesIO(b"%PDF-1.4 notes"), "sermon notes.pdf", "application/pdf"),
        )

        self.assertEqual(response.status_code, 201)
        body = response.get_json()
        self.assertEqual(body["title"], "Sermon Notes")
        self.assertEqual(body["type"], "pdf")
        self.assertEqual(body["url"], "https://storage.example.com/sermon.pdf")
        self.assertEqual(body["fileName"], "sermon_notes.pdf")
        self.assertEqual(body["size"], len(b"%PDF-1.4 notes"))
        self.assertTrue(body["storagePath"].startswith("resources/"))
        self.mock_blob.upload_from_filename.assert_called_once()
        self.mock_blob.make_public.assert_called_once()

        stored = self.db.collection("resources").document(body["id"]).get().to_dict()
        self.assertEqual(stored["storagePath"], body["storagePath"])

    def test_audio_type_is_inferred(self):
        response = self.upload(
            title="Choir Practice",
            file=(io.BytesIO(b"ID3"), "practice.mp3", "audio/mpeg"),
        )

        self.assertEqual(response.get_json()["type"], "audio")

    def test_upload_without_title_stores_nothing(self):
        response = self.upload(
            file=(io.BytesIO(b"%PDF"), "notes.pdf", "application/pdf"),
        )

        self.assertEqual(response.status_code, 400)
        self.mock_blob.upload_from_filename.assert_not_called()

    def test_upload_with_unknown_type_stores_nothing(self):
        response = self.upload(
            title="Slides",
            type="video",
            file=(io.BytesIO(b"data"), "slides.mp4", "video/mp4"),
        )

        self.assertEqual(response.status_code, 400)
        self.mock_blob.upload_from_filename.assert_not_called()

    def test_storage_failure_is_a_store_error(self):
        self.mock_blob.upload_from_filename.side_effect = RuntimeError("bucket missing")

        response = self.upload(
            title="Sermon Notes",
            file=(io.BytesIO(b"%PDF"), "notes.pdf", "application/pdf"),
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {"error": "bucket missing"})

    def test_delete_removes_stored_file(self):
        self.db.collection("resources").document("r1").set(
            {"title": "Notes", "storagePath": "resources/abc/notes.pdf"}
        )

        response = self.client.delete("/resources/r1")

        self.assertEqual(response.status_code, 204)
        self.mock_storage.bucket.return_value.blob.assert_called_with(
            "resources/abc/notes.pdf"
        )
        self.mock_blob.delete.assert_called_once()
        self.assertFalse(self.db.collection("resources").document("r1").get().exists)

    def test_delete_survives_missing_file(self):
        self.db.collection("resources").document("r1").set(
            {"title": "Notes", "storagePath": "resources/abc/notes.pdf"}
        )
        self.mock_blob.delete.side_effect = RuntimeError("not found")

        with patch.object(self.app.logger, "warning") as mock_warning:
            response = self.client.delete("/resources/r1")

        self.assertEqual(response.status_code, 204)
        mock_warning.assert_called_once()

    def test_delete_link_resource_touches_no_storage(self):
        self.db.collection("resources").document("r2").set(
            {"title": "Link", "link": "https://example.com"}
        )

        self.client.delete("/resources/r2")

        self.mock_storage.bucket.assert_not_called()


if __name__ == "__main__":
    unittest.main()
