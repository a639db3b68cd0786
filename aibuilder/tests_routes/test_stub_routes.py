from unittest.mock import patch

from aibuilder.services.deployment import StubDeployer
from aibuilder.tests_routes.base import RpcTestCase


class TestGenerationAndDeployRoutes(RpcTestCase):

    def setUp(self):
        super().setUp()
        self.app.config["DEPLOYER"] = StubDeployer(clock=lambda: 1700000000)
        self.user, self.token = self.register()
        self.project = self.create_project(self.user, self.token, "Shop Front")

    def test_generate_component(self):
        """Test component generation without saving"""
        resp = self.mutate("generateWithAi", {
            "project_id": self.project["id"],
            "prompt": "Create a login form",
            "generation_type": "component",
        }, self.token)

        self.assertEqual(resp.status_code, 200)
        result = resp.get_json()["result"]
        self.assertEqual(result["message"], 'Generated component based on prompt: "Create a login form"')
        self.assertIn("GeneratedComponent", result["generated_content"])

    def test_generate_file_saves_it(self):
        """Test generated files are written into the tree"""
        resp = self.mutate("generateWithAi", {
            "project_id": self.project["id"],
            "prompt": "util",
            "generation_type": "file",
            "file_path": "/src/util.ts",
        }, self.token)
        self.assertTrue(resp.get_json()["result"]["message"].endswith("and saved to project"))

        files = self.query("getProjectFiles", {"projectId": self.project["id"]}, self.token)
        self.assertIn("/src/util.ts", [f["path"] for f in files.get_json()["result"]])

    def test_generate_unsupported_type(self):
        """Test an unknown generation type"""
        resp = self.mutate("generateWithAi", {
            "project_id": self.project["id"], "prompt": "x", "generation_type": "poem",
        }, self.token)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["message"], "Unsupported generation type: poem")

    def test_deploy_production(self):
        """Test deploying a seeded project"""
        resp = self.mutate("deployProject", {
            "project_id": self.project["id"],
            "environment": "production",
            "deployment_config": {"buildCommand": "npm run build"},
        }, self.token)

        self.assertEqual(resp.status_code, 200)
        result = resp.get_json()["result"]
        self.assertEqual(result["deployment_url"], "https://shop-front.vercel.app")
        self.assertEqual(result["message"], 'Project "Shop Front" successfully deployed to production')

    def test_deploy_staging_url(self):
        """Test preview deployments get a timestamped URL"""
        resp = self.mutate("deployProject", {
            "project_id": self.project["id"], "environment": "staging",
        }, self.token)
        self.assertEqual(resp.get_json()["result"]["deployment_url"],
                         "https://shop-front-staging-1700000000.vercel.app")

    def test_deploy_bad_environment(self):
        """Test environment must be a known value"""
        resp = self.mutate("deployProject", {
            "project_id": self.project["id"], "environment": "moon",
        }, self.token)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["field"], "environment")


class TestRpcPlumbing(RpcTestCase):

    def test_healthcheck_is_public(self):
        """Test healthcheck needs no token"""
        resp = self.query("healthcheck")
        self.assertEqual(resp.status_code, 200)
        result = resp.get_json()["result"]
        self.assertEqual(result["status"], "ok")
        self.assertIn("timestamp", result)

    def test_healthz(self):
        """Test the plain liveness endpoint"""
        resp = self.client.get("/api/healthz")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"ok": True})

    def test_unknown_procedure(self):
        """Test unknown procedure names 404"""
        resp = self.query("dropAllTables")
        self.assertEqual(resp.status_code, 404)

    def test_malformed_input(self):
        """Test GET input that is not JSON"""
        resp = self.client.get("/api/rpc/healthcheck", query_string={"input": "{nope"})
        self.assertEqual(resp.status_code, 400)

    def test_non_object_body(self):
        """Test a JSON array body is rejected"""
        _, token = self.register()
        resp = self.client.post("/api/rpc/getProjects", json=[1, 2],
                                headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 400)

    @patch("aibuilder.routes.rpc.ProjectService")
    def test_unexpected_error_is_500(self, mock_service):
        """Test unexpected failures are logged and reported generically"""
        mock_service.return_value.list.side_effect = RuntimeError("db on fire")
        _, token = self.register()

        with self.assertLogs(self.app.logger, level="ERROR"):
            resp = self.query("getProjects", token=token)

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"error": "server_error"})
