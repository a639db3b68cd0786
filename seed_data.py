from dotenv import load_dotenv
from pathlib import Path
import os

# Load environment variables
load_dotenv(dotenv_path=Path(__file__).with_name(".env"), override=True)

from aibuilder.db.engine import make_engine, make_session_factory, init_db
from aibuilder.db.sql_store import SqlStore
from aibuilder.services.auth import AuthService
from aibuilder.services.errors import EmailAlreadyExists
from aibuilder.services.files import FileTreeService
from aibuilder.services.projects import ProjectService

DEMO_USER = {
    "email": "demo@example.com",
    "password": "demo-password",
    "name": "Demo User",
}

def seed_demo():
    """Create a demo user with one starter project, unless the user already exists."""
    engine = make_engine(os.environ["DATABASE_URL"])
    init_db(engine)
    store = SqlStore(make_session_factory(engine)())
    try:
        auth = AuthService(store, os.environ.get("JWT_SECRET", "dev-secret-change-me"))
        try:
            user = auth.register(**DEMO_USER)["user"]
        except EmailAlreadyExists:
            print("  Demo user already exists, skipping seed")
            return

        project = ProjectService(store).create(
            "Starter App", user["id"], "Seeded demo project", {"framework": "React"}
        )
        files = FileTreeService(store)
        src = store.find_file_by_path(project["id"], "/src")
        files.create(user["id"], project["id"], "/src/index.ts",
                     'console.log("Hello World");', "file", src["id"])
        files.create(user["id"], project["id"], "/README.md", "# Starter App\n", "file")

        print(" Demo data created")
        print(f"   Email: {DEMO_USER['email']}")
        print(f"   Password: {DEMO_USER['password']}")
    finally:
        store.close()

if __name__ == "__main__":
    seed_demo()
