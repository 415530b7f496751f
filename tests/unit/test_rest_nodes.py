"""
Unit tests for the node REST endpoints.
"""

import pytest


def ids(records):
    return [record["_id"] for record in records]


class TestListNodes:
    """Test GET /api/nodes."""

    def test_requires_authentication(self, client):
        """Test that a missing Authorization header yields a 401 envelope."""
        response = client.get("/api/nodes")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "AUTHENTICATION_REQUIRED"
        assert body["error"]["statusCode"] == 401

    def test_default_page(self, client, auth_headers):
        response = client.get("/api/nodes", headers=auth_headers["user"])

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Found 3 nodes"
        assert "timestamp" in body
        assert ids(body["data"]["data"]) == ["n1", "n2", "n3"]
        assert body["data"]["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 3,
            "totalPages": 1,
            "hasNext": False,
            "hasPrev": False,
        }

    def test_page_and_limit(self, client, auth_headers):
        """Test page 2 of size 1 over the three fixture nodes."""
        response = client.get("/api/nodes?page=2&limit=1", headers=auth_headers["guest"])
        data = response.json()["data"]

        assert ids(data["data"]) == ["n2"]
        assert data["pagination"]["totalPages"] == 3
        assert data["pagination"]["hasNext"] is True
        assert data["pagination"]["hasPrev"] is True

    def test_tolerant_pagination_values(self, client, auth_headers):
        response = client.get("/api/nodes?page=abc&limit=0", headers=auth_headers["user"])
        pagination = response.json()["data"]["pagination"]

        assert response.status_code == 200
        assert pagination["page"] == 1
        assert pagination["limit"] == 10

    def test_limit_is_clamped(self, client, auth_headers):
        response = client.get("/api/nodes?limit=1000", headers=auth_headers["user"])

        assert response.json()["data"]["pagination"]["limit"] == 100

    def test_name_filter(self, client, auth_headers):
        response = client.get("/api/nodes?name=WEL", headers=auth_headers["user"])

        assert ids(response.json()["data"]["data"]) == ["n1"]
        assert response.json()["message"] == "Found 1 nodes"

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("root=true", ["n1"]),
            ("root=false", ["n2", "n3"]),
            ("root=yes", ["n2", "n3"]),
            ("global=true", ["n3"]),
            ("global=false", ["n1", "n2"]),
            ("colour=blue", ["n2"]),
            ("colour=", ["n1", "n2", "n3"]),
            ("name=e&root=false&global=false", ["n2"]),
        ],
    )
    def test_filters(self, client, auth_headers, query, expected):
        response = client.get(f"/api/nodes?{query}", headers=auth_headers["user"])

        assert ids(response.json()["data"]["data"]) == expected

    def test_filters_apply_before_pagination(self, client, auth_headers):
        response = client.get("/api/nodes?root=false&limit=1&page=2", headers=auth_headers["user"])
        data = response.json()["data"]

        assert ids(data["data"]) == ["n3"]
        assert data["pagination"]["total"] == 2

    def test_unknown_role_is_forbidden(self, client, auth_service):
        token = auth_service.sign({"userId": "x", "role": "superuser"})
        response = client.get("/api/nodes", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"
        assert response.json()["error"]["message"] == "Insufficient permissions for read on nodes"

    def test_numeric_user_id_is_accepted(self, client, auth_service):
        """Test that a signed token with a numeric userId is not a server error."""
        token = auth_service.sign({"userId": 42, "role": "admin"})
        response = client.get("/api/nodes", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["message"] == "Found 3 nodes"

    def test_malformed_claims_are_unauthorized(self, client, auth_service):
        token = auth_service.sign({"userId": ["u"], "role": "admin"})
        response = client.get("/api/nodes", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"


class TestNodeStats:
    """Test GET /api/nodes/stats."""

    def test_stats(self, client, auth_headers):
        response = client.get("/api/nodes/stats", headers=auth_headers["guest"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 3
        assert data["rootNodes"] == 1
        assert data["colourDistribution"] == {"red": 1, "blue": 1, "none": 1}

    def test_requires_authentication(self, client):
        assert client.get("/api/nodes/stats").status_code == 401


class TestGetNode:
    """Test GET /api/nodes/{id}."""

    def test_found(self, client, auth_headers):
        response = client.get("/api/nodes/n2", headers=auth_headers["user"])

        assert response.status_code == 200
        assert response.json()["message"] == "Node retrieved successfully"
        assert response.json()["data"]["name"] == "Goodbye"

    def test_not_found(self, client, auth_headers):
        response = client.get("/api/nodes/missing", headers=auth_headers["user"])

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
        assert body["error"]["message"] == "Node with ID 'missing' not found"
        assert body["path"] == "/api/nodes/missing"


class TestNodeRelations:
    """Test GET /api/nodes/{id}/relations."""

    def test_relations(self, client, auth_headers):
        response = client.get("/api/nodes/n1/relations", headers=auth_headers["admin"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["trigger"]["_id"] == "t1"
        assert ids(data["responses"]) == ["r1", "r2"]
        assert ids(data["actions"]) == ["a1"]
        assert data["parents"] == []

    def test_dangling_references(self, client, auth_headers):
        """Test that dangling foreign keys resolve to null and are skipped in lists."""
        response = client.get("/api/nodes/n2/relations", headers=auth_headers["user"])
        data = response.json()["data"]

        assert data["trigger"] is None
        assert ids(data["actions"]) == ["a2"]
        assert ids(data["parents"]) == ["n1"]

    def test_not_found(self, client, auth_headers):
        response = client.get("/api/nodes/missing/relations", headers=auth_headers["user"])

        assert response.status_code == 404
