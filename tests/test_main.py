import unittest

from fastapi.testclient import TestClient

from ocean_status.main import app


class TestMain(unittest.TestCase):
    def test_app_metadata_and_routes(self):
        self.assertEqual(app.title, "Ocean Status")
        paths = {route.path for route in app.routes}
        self.assertIn("/v1/status", paths)
        self.assertIn("/v1/regions", paths)

    def test_cors_preflight_allows_get(self):
        client = TestClient(app)
        resp = client.options(
            "/v1/regions",
            headers={"Origin": "https://example.com", "Access-Control-Request-Method": "GET"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIn(resp.headers["access-control-allow-origin"], ("*", "https://example.com"))


if __name__ == "__main__":
    unittest.main()
