import pytest

from aibuilder.services.errors import NotFoundOrUnauthorized, UnsupportedGenerationType
from aibuilder.services.generation import (
    CodeGenerator,
    GenerationService,
    TemplateCodeGenerator,
    simulated_delay,
)


@pytest.fixture
def service(store):
    return GenerationService(store, TemplateCodeGenerator())


def test_component_generation_without_path_saves_nothing(service, store, user, project):
    out = service.generate_with_ai(user["id"], project["id"], "Create a login form", "component")
    assert out["message"] == 'Generated component based on prompt: "Create a login form"'
    assert "React" in out["generated_content"]
    assert "useState" in out["generated_content"]
    assert store.list_files(project["id"]) == []


def test_file_generation_saves_new_file(service, store, user, project):
    out = service.generate_with_ai(user["id"], project["id"], "a helper", "file", "/src/helper.ts")
    assert out["message"] == "Generated file content for /src/helper.ts and saved to project"
    assert "Generated TypeScript module" in out["generated_content"]

    saved = store.find_file_by_path(project["id"], "/src/helper.ts")
    assert saved["content"] == out["generated_content"]
    assert saved["file_type"] == "file"


def test_file_generation_does_not_overwrite_existing_file(service, store, user, project):
    with store.atomic():
        store.insert_file(project["id"], "/styles.css", "body {}", "file")

    out = service.generate_with_ai(user["id"], project["id"], "styles", "file", "/styles.css")
    assert out["message"].endswith(" - file already exists - content returned without saving")
    assert ".generated-container" in out["generated_content"]
    assert store.find_file_by_path(project["id"], "/styles.css")["content"] == "body {}"


@pytest.mark.parametrize(
    "file_path, marker",
    [
        (None, "// Generated JavaScript file"),
        ("/app.js", "module.exports"),
        ("/notes.md", "Generated content based on: notes"),
    ],
)
def test_file_templates_follow_extension(file_path, marker):
    content = TemplateCodeGenerator().generate({"name": "P"}, "notes", "file", file_path)
    assert marker in content


def test_feature_and_full_app_messages(service, user, project):
    feature = service.generate_with_ai(user["id"], project["id"], "search", "feature")
    assert feature["message"] == 'Generated feature implementation based on prompt: "search"'
    assert "GeneratedFeature" in feature["generated_content"]

    app = service.generate_with_ai(user["id"], project["id"], "shop", "full_app")
    assert app["message"] == 'Generated full application structure for project "Test Project"'
    assert "Test Project: Application Architecture Overview" in app["generated_content"]


def test_unsupported_type(service, user, project):
    with pytest.raises(UnsupportedGenerationType, match="Unsupported generation type: poem"):
        service.generate_with_ai(user["id"], project["id"], "x", "poem")


def test_ownership_is_checked_before_type(service, other_user, project):
    with pytest.raises(NotFoundOrUnauthorized):
        service.generate_with_ai(other_user["id"], project["id"], "x", "poem")


def test_custom_generator_is_used(store, user, project):
    class Fixed(CodeGenerator):
        def generate(self, project, prompt, generation_type, file_path=None):
            return f"{project['name']}|{prompt}|{generation_type}"

    out = GenerationService(store, Fixed()).generate_with_ai(user["id"], project["id"], "hi", "feature")
    assert out["generated_content"] == "Test Project|hi|feature"


def test_simulated_delay_is_capped(monkeypatch):
    slept = []
    monkeypatch.setattr("aibuilder.services.generation.time.sleep", slept.append)
    simulated_delay(10, 500, 2000)
    simulated_delay(1, 0, 2000)
    assert slept == [2.0]


def test_simulated_delay_runs_outside_the_transaction(store, user, project, monkeypatch):
    seen = []

    def fake_delay(units, per_unit_ms, max_ms):
        seen.append(store.session.in_transaction())

    monkeypatch.setattr("aibuilder.services.generation.simulated_delay", fake_delay)
    service = GenerationService(store, TemplateCodeGenerator(), delay_ms=50)
    service.generate_with_ai(user["id"], project["id"], "x", "file", "/a.ts")

    assert seen == [False]
    assert store.find_file_by_path(project["id"], "/a.ts") is not None
