from aibuilder.tests_routes.base import RpcTestCase


class TestProjectsRoutes(RpcTestCase):

    def setUp(self):
        super().setUp()
        self.user, self.token = self.register()

    def test_create_project_seeds_directories(self):
        """Test createProject returns the row and seeds /src and /public"""
        project = self.create_project(
            self.user, self.token,
            description="A test project",
            metadata={"framework": "React", "language": "TypeScript"},
        )
        self.assertEqual(project["name"], "Test Project")
        self.assertEqual(project["user_id"], self.user["id"])
        self.assertEqual(project["metadata"], {"framework": "React", "language": "TypeScript"})
        self.assertIn("created_at", project)

        resp = self.query("getProjectFiles", {"projectId": project["id"]}, self.token)
        self.assertEqual(resp.status_code, 200)
        files = resp.get_json()["result"]
        self.assertEqual([f["path"] for f in files], ["/public", "/src"])
        self.assertTrue(all(f["file_type"] == "directory" for f in files))

    def test_create_project_for_another_user_is_forbidden(self):
        """Test user_id in the payload must be the caller"""
        other, _ = self.register("other@example.com")
        resp = self.mutate("createProject", {"name": "X", "user_id": other["id"]}, self.token)
        self.assertEqual(resp.status_code, 403)

    def test_create_project_requires_name(self):
        """Test an empty name is rejected"""
        resp = self.mutate("createProject", {"name": "", "user_id": self.user["id"]}, self.token)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["field"], "name")

    def test_create_project_for_deleted_user(self):
        """Test a valid token for a user id that does not exist"""
        ghost = self.token_for(4242)
        resp = self.mutate("createProject", {"name": "X", "user_id": 4242}, ghost)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()["message"], "User with id 4242 does not exist")

    def test_get_projects_lists_only_mine(self):
        """Test getProjects is owner-scoped and newest first"""
        first = self.create_project(self.user, self.token, "First")
        second = self.create_project(self.user, self.token, "Second")
        other, other_token = self.register("other@example.com")
        self.create_project(other, other_token, "Theirs")

        resp = self.query("getProjects", {"userId": self.user["id"]}, self.token)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([p["id"] for p in resp.get_json()["result"]], [second["id"], first["id"]])

    def test_get_project_by_id_returns_null_for_foreign(self):
        """Test getProjectById yields null rather than an error for other users' projects"""
        project = self.create_project(self.user, self.token)
        _, other_token = self.register("other@example.com")

        mine = self.query("getProjectById", {"projectId": project["id"]}, self.token)
        self.assertEqual(mine.get_json()["result"]["id"], project["id"])

        theirs = self.query("getProjectById", {"projectId": project["id"]}, other_token)
        self.assertEqual(theirs.status_code, 200)
        self.assertIsNone(theirs.get_json()["result"])

    def test_update_project_partial(self):
        """Test only supplied fields change"""
        project = self.create_project(self.user, self.token, description="keep")
        resp = self.mutate("updateProject", {"id": project["id"], "name": "Renamed"}, self.token)

        self.assertEqual(resp.status_code, 200)
        updated = resp.get_json()["result"]
        self.assertEqual(updated["name"], "Renamed")
        self.assertEqual(updated["description"], "keep")
        self.assertGreater(updated["updated_at"], project["updated_at"])

    def test_update_project_foreign(self):
        """Test updating someone else's project"""
        project = self.create_project(self.user, self.token)
        _, other_token = self.register("other@example.com")
        resp = self.mutate("updateProject", {"id": project["id"], "name": "Mine now"}, other_token)

        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()["message"], "Project not found or access denied")

    def test_delete_project(self):
        """Test deleteProject removes the project and its files"""
        project = self.create_project(self.user, self.token)
        resp = self.mutate("deleteProject", {"projectId": project["id"]}, self.token)
        self.assertEqual(resp.status_code, 200)
        self.assertIs(resp.get_json()["result"], True)

        again = self.query("getProjectWithFiles", {"projectId": project["id"]}, self.token)
        self.assertIsNone(again.get_json()["result"])

    def test_get_project_with_files(self):
        """Test the combined project + tree view"""
        project = self.create_project(self.user, self.token)
        resp = self.query("getProjectWithFiles", {"projectId": project["id"]}, self.token)

        self.assertEqual(resp.status_code, 200)
        result = resp.get_json()["result"]
        self.assertEqual(result["project"]["id"], project["id"])
        self.assertEqual(len(result["files"]), 2)

    def test_mutation_via_get_is_rejected(self):
        """Test mutations cannot be called with GET"""
        project = self.create_project(self.user, self.token)
        resp = self.query("deleteProject", {"projectId": project["id"]}, self.token)
        self.assertEqual(resp.status_code, 405)

    def test_queries_accept_post(self):
        """Test queries also work over POST"""
        self.create_project(self.user, self.token)
        resp = self.mutate("getProjects", {}, self.token)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.get_json()["result"]), 1)
