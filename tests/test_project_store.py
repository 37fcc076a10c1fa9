"""
Tests for the SQLAlchemy-backed project store.

Covers creation defaults, shallow-merge updates, soft delete and the
error taxonomy raised to the HTTP layer.
"""

import pytest
from sqlalchemy.exc import OperationalError

import models.project
from errors import InternalError, NotFoundError, ValidationError


class TestCreate:
    def test_create_sets_defaults(self, store):
        project = store.create("Shop", description="My shop", category="ecommerce",
                               target_url="https://example.com", style="modern")

        assert project.id
        assert project.status == "active"
        assert project.created_at == project.last_modified
        assert project.description == "My shop"
        assert project.project_metadata == {
            "category": "ecommerce",
            "targetUrl": "https://example.com",
            "style": "modern",
            "framework": "react",
            "packages": [],
            "features": [],
        }
        assert project.conversation["messages"] == []
        assert project.conversation["context"]["currentProject"] == "Shop"
        assert project.conversation["context"]["scrapedWebsites"] == []
        assert project.files == {}
        assert project.settings == {
            "aiModel": "moonshotai/kimi-k2-instruct",
            "autoSave": True,
            "theme": "auto",
        }

    def test_optional_fields_fall_back(self, store):
        project = store.create("Bare")
        assert project.description == ""
        assert project.project_metadata["category"] == "other"
        assert project.project_metadata["targetUrl"] is None

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_create_rejects_missing_name(self, store, name):
        with pytest.raises(ValidationError, match="Project name is required"):
            store.create(name)
        assert store.list() == []

    def test_create_rejects_unknown_category(self, store):
        with pytest.raises(ValidationError, match="Invalid category"):
            store.create("Shop", category="groceries")

    def test_ids_are_unique(self, store):
        ids = {store.create(f"p{i}").id for i in range(20)}
        assert len(ids) == 20


class TestGetAndList:
    def test_get_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.get("does-not-exist")

    def test_list_includes_every_status(self, store):
        a = store.create("A")
        b = store.create("B")
        store.update(b.id, {"status": "archived"})
        c = store.create("C")
        store.soft_delete(c.id)

        assert {p.id for p in store.list()} == {a.id, b.id, c.id}


class TestUpdate:
    def test_partial_update_leaves_other_fields(self, store):
        project = store.create("Shop", category="logistics", target_url="https://a.io")
        before = {
            "name": project.name,
            "status": project.status,
            "created_at": project.created_at,
            "metadata": dict(project.project_metadata),
            "conversation": dict(project.conversation),
            "settings": dict(project.settings),
            "files": dict(project.files),
        }

        updated = store.update(project.id, {"description": "new"})

        assert updated.description == "new"
        assert updated.name == before["name"]
        assert updated.status == before["status"]
        assert updated.created_at == before["created_at"]
        assert updated.project_metadata == before["metadata"]
        assert updated.conversation == before["conversation"]
        assert updated.settings == before["settings"]
        assert updated.files == before["files"]
        assert updated.last_modified >= before["created_at"]

    def test_metadata_is_replaced_not_merged(self, store):
        project = store.create("Shop", category="ecommerce", target_url="https://a.io", style="bold")

        updated = store.update(project.id, {"metadata": {"category": "logistics"}})

        assert updated.project_metadata == {
            "category": "logistics",
            "targetUrl": None,
            "style": None,
            "framework": None,
            "packages": [],
            "features": [],
        }

    def test_partial_settings_are_accepted(self, store):
        project = store.create("Shop")

        updated = store.update(project.id, {"settings": {"theme": "dark"}})

        assert updated.settings == {"aiModel": None, "autoSave": None, "theme": "dark"}

    def test_files_and_conversation_are_stored(self, store):
        project = store.create("Shop")
        files = {"src/App.jsx": {"content": "export default 1", "lastModified": 10, "type": "component"}}
        conversation = {
            "messages": [{"id": "m1", "role": "user", "content": "hi", "timestamp": 5}],
            "context": {"currentProject": "Shop", "lastGeneratedCode": "x"},
        }

        updated = store.update(project.id, {"files": files, "conversation": conversation})

        assert updated.files == files
        assert updated.conversation["messages"][0]["content"] == "hi"
        assert updated.conversation["context"]["lastGeneratedCode"] == "x"
        assert updated.conversation["context"]["appliedCode"] == []

    def test_last_modified_never_decreases(self, store, monkeypatch):
        project = store.create("Shop")
        stamps = [project.last_modified]
        for i in range(5):
            stamps.append(store.update(project.id, {"description": str(i)}).last_modified)
        assert stamps == sorted(stamps)

        # A clock stepping backwards must not move lastModified back
        monkeypatch.setattr(models.project, "now_ms", lambda: 0)
        updated = store.update(project.id, {"description": "late"})
        assert updated.last_modified == stamps[-1]

    def test_update_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.update("missing", {"description": "x"})

    @pytest.mark.parametrize("fields, message", [
        ({"name": ""}, "Project name is required"),
        ({"status": "paused"}, "Invalid status"),
        ({"id": "other"}, "cannot be changed"),
        ({"created_at": 1}, "cannot be changed"),
        ({"metadata": None}, "cannot be null"),
        ({"settings": {"theme": "neon"}}, "Invalid settings"),
        ({"owner": "me"}, "Unknown project field"),
    ])
    def test_update_rejects_invalid_fields(self, store, fields, message):
        project = store.create("Shop")
        with pytest.raises(ValidationError, match=message):
            store.update(project.id, fields)
        assert store.get(project.id).name == "Shop"

    def test_archive_and_reactivate(self, store):
        project = store.create("Shop")
        assert store.update(project.id, {"status": "archived"}).status == "archived"
        assert store.update(project.id, {"status": "active"}).status == "active"

    def test_deleted_is_terminal(self, store):
        project = store.create("Shop")
        store.soft_delete(project.id)
        with pytest.raises(ValidationError, match="cannot be restored"):
            store.update(project.id, {"status": "active"})
        # Other fields of a deleted project can still be edited
        assert store.update(project.id, {"description": "gone"}).status == "deleted"


class TestSoftDelete:
    def test_soft_delete_keeps_record(self, store):
        project = store.create("Shop")
        created = project.last_modified

        store.soft_delete(project.id)

        fetched = store.get(project.id)
        assert fetched.status == "deleted"
        assert fetched.last_modified >= created
        assert len(store.list()) == 1

    def test_soft_delete_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.soft_delete("missing")


def test_database_failure_becomes_internal_error(store, db_session, monkeypatch):
    def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", broken_commit)
    with pytest.raises(InternalError) as excinfo:
        store.create("Shop")
    assert excinfo.value.message == "Failed to create project"
    assert excinfo.value.status_code == 500
