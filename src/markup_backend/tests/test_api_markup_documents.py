"""
Endpoint tests for /markup-documents

Uses FastAPI's TestClient with dependency overrides for the database
session and the current principal.
"""

import pytest

from markup_backend.interface.markup_documents import MarkupDocumentQuery
from markup_backend.model.markup import MarkupDocument
from markup_backend.repositories.base import RepositoryError
from markup_backend.repositories.markup_document import MarkupDocumentRepository
from markup_backend.tests.conftest import make_document


def create_payload(**overrides):
    payload = {
        "title": "Doc",
        "original_blueprint_url": "https://files.example.com/plan.pdf",
        "original_blueprint_filename": "plan.pdf",
        "markup_data": [{"type": "line", "points": [0, 0, 10, 10]}],
    }
    payload.update(overrides)
    return payload


def list_titles(response) -> list:
    assert response.status_code == 200, response.text
    return [item["title"] for item in response.json()["data"]]


def create_document(client_for, user_id: str, **overrides) -> dict:
    response = client_for(user_id).post("/markup-documents", json=create_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]


# ============================================================================
# Scenarios
# ============================================================================

class TestScenarios:
    def test_personal_documents_are_private(self, client_for):
        doc1 = create_document(client_for, "worker-1", title="Doc1", location="personal")

        assert "Doc1" not in list_titles(client_for("worker-2").get("/markup-documents", params={"location": "personal"}))
        assert "Doc1" in list_titles(client_for("worker-1").get("/markup-documents", params={"location": "personal"}))

        assert client_for("worker-2").get(f"/markup-documents/{doc1['id']}").status_code == 404

    def test_shared_documents_are_scoped_to_site(self, client_for):
        create_document(client_for, "worker-1", title="Doc2", location="shared")

        assert "Doc2" in list_titles(client_for("worker-3").get("/markup-documents", params={"location": "shared"}))
        assert "Doc2" not in list_titles(client_for("worker-4").get("/markup-documents", params={"location": "shared"}))

    def test_admin_reads_personal_document(self, client_for):
        doc1 = create_document(client_for, "worker-1", title="Doc1", location="personal")

        response = client_for("admin-1").get(f"/markup-documents/{doc1['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["title"] == "Doc1"
        assert body["data"]["markup_data"] == [{"type": "line", "points": [0, 0, 10, 10]}]
        assert body["data"]["created_by"] == "worker-1"

    def test_soft_deleted_document_disappears(self, client_for):
        doc2 = create_document(client_for, "worker-1", title="Doc2", location="shared")

        response = client_for("worker-1").delete(f"/markup-documents/{doc2['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["is_deleted"] is True

        assert client_for("worker-1").get(f"/markup-documents/{doc2['id']}").status_code == 404
        assert client_for("worker-3").get(f"/markup-documents/{doc2['id']}").status_code == 404
        assert client_for("worker-1").delete(f"/markup-documents/{doc2['id']}").status_code == 404

        for user_id in ("worker-1", "worker-3", "admin-1", "sysadmin"):
            assert "Doc2" not in list_titles(client_for(user_id).get("/markup-documents"))

    def test_missing_required_fields(self, client_for):
        response = client_for("worker-1").post("/markup-documents", json={"description": "x"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert [detail["field"] for detail in body["details"]] == [
            "title", "original_blueprint_url", "original_blueprint_filename"
        ]


# ============================================================================
# Create
# ============================================================================

class TestCreate:
    def test_ownership_comes_from_profile(self, client_for, seeded):
        data = create_document(client_for, "worker-1", created_by="worker-2", site_id="site-3", is_deleted=True)

        assert data["created_by"] == "worker-1"
        assert data["site_id"] == "site-1"
        assert data["is_deleted"] is False
        assert data["markup_count"] == 1
        assert data["location"] == "personal"

        stored = seeded.get(MarkupDocument, data["id"])
        assert stored.created_by == "worker-1"

    def test_validation_happens_before_storage(self, client_for, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("store must not be reached")

        monkeypatch.setattr(MarkupDocumentRepository, "insert", fail)

        response = client_for("worker-1").post("/markup-documents", json={"title": ""})
        assert response.status_code == 400

    def test_wrong_types_are_reported_with_missing_fields(self, client_for):
        response = client_for("worker-1").post("/markup-documents", json={"title": 5, "description": "x"})

        assert response.status_code == 400
        details = response.json()["details"]
        assert [detail["field"] for detail in details] == [
            "original_blueprint_url", "original_blueprint_filename", "title"
        ]
        assert details[2]["message"] == "must be a string"

    def test_malformed_json_is_a_validation_error(self, client_for):
        response = client_for("worker-1").post(
            "/markup-documents",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["details"]

    def test_inactive_profile_cannot_create(self, client_for):
        response = client_for("worker-inactive").post("/markup-documents", json=create_payload())
        assert response.status_code == 403


# ============================================================================
# Update
# ============================================================================

class TestUpdate:
    def test_ownership_fields_are_immutable(self, client_for, seeded):
        data = create_document(client_for, "worker-1", location="personal")

        response = client_for("worker-1").patch(f"/markup-documents/{data['id']}", json={
            "title": "Renamed",
            "created_by": "worker-2",
            "site_id": "site-3",
            "location": "shared",
        })

        assert response.status_code == 200, response.text
        updated = response.json()["data"]
        assert updated["title"] == "Renamed"
        assert updated["created_by"] == "worker-1"
        assert updated["site_id"] == "site-1"
        assert updated["location"] == "personal"

    def test_markup_count_is_recomputed(self, client_for):
        data = create_document(client_for, "worker-1")

        response = client_for("worker-1").patch(
            f"/markup-documents/{data['id']}",
            json={"markup_data": [{"type": "text"}, {"type": "arrow"}, {"type": "cloud"}]},
        )
        assert response.json()["data"]["markup_count"] == 3

    def test_empty_title_is_rejected(self, client_for):
        data = create_document(client_for, "worker-1")
        response = client_for("worker-1").patch(f"/markup-documents/{data['id']}", json={"title": " "})
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "title"

    def test_other_users_personal_document_is_not_found(self, client_for):
        data = create_document(client_for, "worker-1")
        response = client_for("worker-2").patch(f"/markup-documents/{data['id']}", json={"title": "Hijacked"})
        assert response.status_code == 404

    def test_site_member_updates_shared_document(self, client_for):
        data = create_document(client_for, "worker-1", location="shared")
        response = client_for("worker-3").patch(f"/markup-documents/{data['id']}", json={"description": "Checked"})
        assert response.status_code == 200
        assert response.json()["data"]["description"] == "Checked"

    def test_malformed_patch_is_rejected_before_lookup(self, client_for, documents):
        unknown = client_for("worker-1").patch("/markup-documents/does-not-exist", json={"title": ""})
        hidden = client_for("worker-1").patch(f"/markup-documents/{documents['personal-w2'].id}", json={"title": ""})

        assert unknown.status_code == hidden.status_code == 400
        assert unknown.json()["details"] == [{"field": "title", "message": "must not be empty"}]

    def test_wrong_typed_patch_fields(self, client_for):
        data = create_document(client_for, "worker-1")
        response = client_for("worker-1").patch(f"/markup-documents/{data['id']}", json={"title": 7, "file_size": "big"})

        assert response.status_code == 400
        assert [detail["field"] for detail in response.json()["details"]] == ["title", "file_size"]

    def test_admin_updates_and_deletes_member_document(self, client_for, seeded):
        data = create_document(client_for, "worker-2")

        response = client_for("admin-1").patch(f"/markup-documents/{data['id']}", json={"title": "Reviewed"})
        assert response.status_code == 200, response.text
        assert response.json()["data"]["title"] == "Reviewed"
        assert response.json()["data"]["created_by"] == "worker-2"

        response = client_for("admin-1").delete(f"/markup-documents/{data['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["is_deleted"] is True

    def test_system_admin_updates_any_document(self, client_for, documents):
        response = client_for("sysadmin").patch(f"/markup-documents/{documents['personal-w2'].id}", json={"description": "Audit"})
        assert response.status_code == 200
        assert response.json()["data"]["description"] == "Audit"

    def test_admin_of_other_organization_cannot_mutate(self, client_for, seeded, documents):
        for key in ("personal-w2", "unassigned"):
            document_id = documents[key].id
            assert client_for("admin-2").patch(f"/markup-documents/{document_id}", json={"title": "Taken"}).status_code == 404
            assert client_for("admin-2").delete(f"/markup-documents/{document_id}").status_code == 404

            seeded.expire_all()
            stored = seeded.get(MarkupDocument, document_id)
            assert stored.title != "Taken"
            assert stored.is_deleted is False


# ============================================================================
# Read
# ============================================================================

class TestRead:
    def test_unknown_and_inaccessible_look_the_same(self, client_for, documents):
        unknown = client_for("worker-2").get("/markup-documents/does-not-exist")
        hidden = client_for("worker-2").get(f"/markup-documents/{documents['personal-w1'].id}")

        assert unknown.status_code == hidden.status_code == 404
        assert unknown.json() == hidden.json()

    def test_admin_is_limited_to_organization(self, client_for, documents):
        assert client_for("admin-2").get(f"/markup-documents/{documents['personal-w1'].id}").status_code == 404
        assert client_for("admin-2").get(f"/markup-documents/{documents['shared-site3'].id}").status_code == 200
        assert client_for("admin-1").get(f"/markup-documents/{documents['unassigned'].id}").status_code == 200
        assert client_for("admin-2").get(f"/markup-documents/{documents['unassigned'].id}").status_code == 404

    def test_system_admin_reads_any_document(self, client_for, documents):
        for key in ("personal-w1", "shared-site2", "shared-site3", "unassigned"):
            assert client_for("sysadmin").get(f"/markup-documents/{documents[key].id}").status_code == 200


# ============================================================================
# List
# ============================================================================

class TestList:
    def test_query_range(self):
        query = MarkupDocumentQuery(page=2, limit=2)
        assert query.offset == 2
        assert query.range == (2, 3)

    def test_worker_sees_own_personal_and_site_shared(self, client_for, documents):
        titles = list_titles(client_for("worker-1").get("/markup-documents"))
        assert sorted(titles) == ["Site 1 shared", "W1 personal"]

    def test_site_manager_has_no_override(self, client_for, documents):
        titles = list_titles(client_for("worker-3").get("/markup-documents"))
        assert titles == ["Site 1 shared"]

    def test_profile_without_site(self, client_for, documents):
        assert list_titles(client_for("worker-nosite").get("/markup-documents", params={"location": "shared"})) == []
        assert list_titles(client_for("worker-nosite").get("/markup-documents")) == ["Unassigned legacy"]

    def test_admin_sees_organization_and_unassigned(self, client_for, documents):
        titles = list_titles(client_for("admin-1").get("/markup-documents"))
        assert sorted(titles) == ["Site 1 shared", "Site 2 shared", "Unassigned legacy", "W1 personal", "W2 personal"]

    def test_admin_does_not_see_other_tenants_unassigned(self, client_for, documents):
        titles = list_titles(client_for("admin-2").get("/markup-documents"))
        assert titles == ["Harbour shared"]

    def test_system_admin_sees_all_live_documents(self, client_for, documents):
        response = client_for("sysadmin").get("/markup-documents")
        assert len(list_titles(response)) == 6
        assert response.headers["X-Total-Count"] == "6"

    def test_search_and_site_filters(self, client_for, documents):
        assert list_titles(client_for("sysadmin").get("/markup-documents", params={"search": "SHARED"})) == [
            "Harbour shared", "Site 2 shared", "Site 1 shared"
        ]
        assert sorted(list_titles(client_for("sysadmin").get("/markup-documents", params={"site": "site-1"}))) == [
            "Site 1 shared", "W1 personal", "W2 personal"
        ]
        assert len(list_titles(client_for("sysadmin").get("/markup-documents", params={"site": "all"}))) == 6

    def test_list_items_carry_creator_name(self, client_for, documents):
        response = client_for("worker-1").get("/markup-documents", params={"location": "personal"})
        item = response.json()["data"][0]
        assert item["created_by_name"] == "Worker 1"
        assert "markup_data" not in item

    def test_pagination(self, client_for, seeded):
        for minute in range(5):
            make_document(seeded, "worker-1", title=f"Page doc {minute}", minutes=minute)

        response = client_for("worker-1").get("/markup-documents", params={"page": 2, "limit": 2})

        assert list_titles(response) == ["Page doc 2", "Page doc 1"]
        assert response.json()["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}
        assert response.headers["X-Total-Count"] == "5"

    def test_page_past_the_end_is_empty(self, client_for, seeded):
        make_document(seeded, "worker-1")
        response = client_for("worker-1").get("/markup-documents", params={"page": 4, "limit": 10})
        assert list_titles(response) == []
        assert response.json()["pagination"]["total"] == 1

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 1000}, {"location": "public"}])
    def test_invalid_query_parameters(self, client_for, seeded, params):
        response = client_for("worker-1").get("/markup-documents", params=params)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_store_failure_is_internal_error(self, client_for, seeded, monkeypatch):
        def fail(*args, **kwargs):
            raise RepositoryError("connection reset")

        monkeypatch.setattr(MarkupDocumentRepository, "list", fail)

        response = client_for("worker-1").get("/markup-documents")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}


# ============================================================================
# Authentication gate
# ============================================================================

class TestAuthenticationGate:
    def test_missing_credentials(self, client_for, seeded):
        response = client_for(None).get("/markup-documents")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_missing_profile_is_unauthenticated(self, client_for, documents):
        assert client_for("no-profile").get("/markup-documents").status_code == 401
        assert client_for("no-profile").get(f"/markup-documents/{documents['personal-w1'].id}").status_code == 401

    def test_inactive_profile_is_forbidden(self, client_for, documents):
        assert client_for("worker-inactive").get("/markup-documents").status_code == 403
        assert client_for("worker-inactive").get(f"/markup-documents/{documents['personal-w1'].id}").status_code == 403
        assert client_for("worker-inactive").get("/markup-documents/does-not-exist").status_code == 403
