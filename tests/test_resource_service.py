import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from core.errors import ResourceNotFound, ResourceInternalError
from services.factory import ServiceFactory
from services.resource_service import ResourceService, register


class ResourceServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "export.png"
        self.svc = ResourceService(resource_path=self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_media_type_guessed_from_extension(self):
        self.assertEqual(self.svc.media_type, "image/png")
        self.assertEqual(ResourceService(self.path, media_type="image/webp").media_type, "image/webp")
        self.assertEqual(ResourceService(Path(self.tmp.name) / "blob").media_type, "application/octet-stream")

    def test_get_resource(self):
        with self.assertRaises(ResourceNotFound):
            self.svc.get_resource()
        self.path.write_bytes(b"\x89PNG")
        self.assertEqual(self.svc.get_resource(), b"\x89PNG")

    def test_unexpected_read_failure(self):
        self.path.write_bytes(b"\x89PNG")
        with mock.patch.object(self.svc, "_read", side_effect=OSError("disk gone")):
            with self.assertRaises(ResourceInternalError):
                self.svc.get_resource()

    def test_directory_at_path_is_internal(self):
        self.path.mkdir()
        with self.assertRaises(ResourceInternalError):
            self.svc.get_resource()

    def test_startup_with_missing_file(self):
        with self.assertLogs("services.resource_service.service", level="WARNING"):
            asyncio.run(self.svc.startup())
        info = self.svc.info()
        self.assertTrue(info["ready"])
        self.assertFalse(info["available"])
        asyncio.run(self.svc.shutdown())
        self.assertFalse(self.svc.info()["ready"])


class FactoryTestCase(unittest.TestCase):
    def test_register_and_lifecycle(self):
        factory = ServiceFactory()
        register(factory, resource_path="/nonexistent/chart.png")
        self.assertEqual(factory.list_registered(), ["resource"])
        self.assertIsNone(factory.get("resource"))

        asyncio.run(factory.startup_all())
        svc = factory.get("resource")
        self.assertIsInstance(svc, ResourceService)
        self.assertIs(factory.create("resource"), svc)
        self.assertTrue(factory.info_all()["resource"]["ready"])

        replaced = factory.create("resource", force_new=True, resource_path="/tmp/other.png")
        self.assertIsNot(replaced, svc)
        self.assertEqual(replaced.resource_path, Path("/tmp/other.png"))

        asyncio.run(factory.shutdown_all())

    def test_unknown_service(self):
        with self.assertRaises(KeyError):
            ServiceFactory().create("missing")

    def test_rejects_non_service(self):
        factory = ServiceFactory()
        factory.register("bogus", lambda **kw: object())
        with self.assertRaises(TypeError):
            factory.create("bogus")


if __name__ == "__main__":
    unittest.main()
