import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient

from core.config import get_settings
from main import app, factory
from services.resource_service.api import NOT_FOUND_TEXT, INTERNAL_ERROR_TEXT

PNG_BYTES = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A]) + b"chart-body"


class APITestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # 以上下文方式进入，触发 lifespan（注册并启动服务）
        cls.client = TestClient(app)
        cls.client.__enter__()

    @classmethod
    def tearDownClass(cls):
        cls.client.__exit__(None, None, None)

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "chart.png"
        self.svc = factory.create("resource", force_new=True, resource_path=self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_health(self):
        r = self.client.get("/")
        self.assertIn(r.status_code, (200, 204))
        body = r.json()
        self.assertIn("resource", body)
        self.assertEqual(body["resource"]["resource_path"], str(self.path))
        self.assertFalse(body["resource"]["available"])

    def test_app_uses_settings(self):
        settings = get_settings()
        self.assertEqual(app.title, settings.APP_NAME)
        self.assertEqual(app.debug, settings.DEBUG)

    def test_resource_present(self):
        self.path.write_bytes(PNG_BYTES)
        r = self.client.get("/resource")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.headers["content-type"], "image/png")
        self.assertEqual(r.headers["cache-control"], "no-store")
        self.assertEqual(r.content, PNG_BYTES)

    def test_resource_absent(self):
        r = self.client.get("/resource")
        self.assertEqual(r.status_code, 404)
        self.assertTrue(r.headers["content-type"].startswith("text/plain"))
        self.assertEqual(r.text, NOT_FOUND_TEXT)

    def test_follows_file_presence(self):
        self.assertEqual(self.client.get("/resource").status_code, 404)
        self.path.write_bytes(PNG_BYTES)
        self.assertEqual(self.client.get("/resource").status_code, 200)
        self.path.unlink()
        self.assertEqual(self.client.get("/resource").status_code, 404)
        self.path.write_bytes(b"second export")
        r = self.client.get("/resource")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.content, b"second export")

    def test_unchanged_file_is_byte_identical(self):
        self.path.write_bytes(PNG_BYTES)
        first = self.client.get("/resource")
        second = self.client.get("/resource")
        self.assertEqual(first.content, second.content)

    def test_legacy_route(self):
        self.path.write_bytes(PNG_BYTES)
        r = self.client.get("/powerbi-image")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.content, PNG_BYTES)

    def test_read_failure_is_500(self):
        self.path.write_bytes(PNG_BYTES)
        with mock.patch.object(self.svc, "_read", side_effect=PermissionError("denied")):
            r = self.client.get("/resource")
        self.assertEqual(r.status_code, 500)
        self.assertTrue(r.headers["content-type"].startswith("text/plain"))
        self.assertEqual(r.text, INTERNAL_ERROR_TEXT)
        self.assertNotIn("denied", r.text)

        # 单个请求失败不影响后续请求
        self.assertEqual(self.client.get("/resource").status_code, 200)

    def test_file_removed_between_check_and_read(self):
        self.path.write_bytes(PNG_BYTES)
        with mock.patch.object(self.svc, "_read", side_effect=FileNotFoundError(str(self.path))):
            r = self.client.get("/resource")
        self.assertEqual(r.status_code, 404)

    def test_configured_media_type(self):
        factory.create("resource", force_new=True, resource_path=self.path, media_type="image/jpeg")
        self.path.write_bytes(b"\xff\xd8\xff")
        r = self.client.get("/resource")
        self.assertEqual(r.headers["content-type"], "image/jpeg")


if __name__ == "__main__":
    unittest.main()
