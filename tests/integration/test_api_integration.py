"""
Integration tests for the QuoteVault API
Exercises full request flows against an in-memory store
"""

import pytest

from utils.date_utils import now_millis
from utils.security_utils import create_token, SESSION_MAX_AGE_MS
from tests.factories import QuotePayloadFactory


def _collect_ids(client, **params):
    """Page through /quotes and return every id in order"""
    ids = []
    cursor = None
    while True:
        query = dict(params)
        if cursor:
            query["cursor"] = cursor
        data = client.get("/quotes", params=query).json()
        ids.extend(item["id"] for item in data["items"])
        cursor = data.get("nextCursor")
        if not cursor:
            return ids


@pytest.mark.integration
class TestQuoteWorkflow:
    """End-to-end quote scenarios"""

    def test_hashtags_from_string(self, client, create_quote):
        """Test '#a #b' is stored as two tags"""
        created = create_quote(hashtags="#a #b")
        assert created["hashtags"] == ["a", "b"]
        assert client.get("/tags").json() == ["a", "b"]

    def test_tag_filter_scenario(self, client, create_quote):
        """Test tags=a,b only returns quotes carrying both tags"""
        ab = create_quote(title="first", hashtags=["a", "b"])
        ac = create_quote(title="second", hashtags=["a", "c"])

        items = client.get("/quotes", params={"tags": "a,b"}).json()["items"]
        assert [item["id"] for item in items] == [ab["id"]]

        items = client.get("/quotes", params={"tags": "#A"}).json()["items"]
        assert {item["id"] for item in items} == {ab["id"], ac["id"]}

    def test_search_by_author(self, client, create_quote):
        """Test q=steve finds a quote by its author"""
        jobs = create_quote(
            title="The only way to do great work",
            content="The only way to do great work is to love what you do.",
            author="Steve Jobs"
        )
        create_quote(title="Be the change", content="Be the change.", author="Mahatma Gandhi")

        items = client.get("/quotes", params={"q": "steve"}).json()["items"]
        assert [item["id"] for item in items] == [jobs["id"]]

    def test_invalid_language_ignored(self, client, create_quote):
        """Test language=fr returns the same result as no language filter"""
        create_quote(language="en")
        create_quote(language="es")
        create_quote(language="fr")

        unfiltered = client.get("/quotes").json()
        assert client.get("/quotes", params={"language": "fr"}).json() == unfiltered
        assert len(client.get("/quotes", params={"language": "es"}).json()["items"]) == 1

    def test_pagination_with_inserts_between_pages(self, client, create_quote):
        """Test every original quote is seen exactly once while new ones arrive"""
        for i in range(7):
            create_quote(title=f"original {i}")
        originals = [item["id"] for item in client.get("/quotes", params={"limit": 100}).json()["items"]]

        first = client.get("/quotes", params={"limit": 3}).json()
        seen = [item["id"] for item in first["items"]]
        cursor = first["nextCursor"]

        while cursor:
            create_quote(title="inserted while paging")
            page = client.get("/quotes", params={"limit": 3, "cursor": cursor}).json()
            seen.extend(item["id"] for item in page["items"])
            cursor = page.get("nextCursor")

        assert seen == originals

    def test_oldest_pagination_sees_every_row(self, client, create_quote):
        for i in range(5):
            create_quote(title=f"q{i}")
        expected = [item["id"] for item in client.get("/quotes", params={"sort": "oldest"}).json()["items"]]
        assert len(expected) == 5
        assert _collect_ids(client, limit=2, sort="oldest") == expected

    def test_random_payloads_round_trip(self, client):
        """Test factory payloads survive create and fetch"""
        for payload in QuotePayloadFactory.create_payloads(5):
            created = client.post("/quotes", json=payload).json()
            fetched = client.get(f"/quotes/{created['id']}").json()
            assert fetched == created
            assert fetched["language"] == payload["language"]

    def test_deleted_cursor_returns_empty_page(self, client, create_quote, admin_headers):
        for i in range(3):
            create_quote(title=f"q{i}")
        first = client.get("/quotes", params={"limit": 1}).json()

        client.delete(f"/quotes/{first['nextCursor']}", headers=admin_headers)
        page = client.get("/quotes", params={"limit": 1, "cursor": first["nextCursor"]}).json()
        assert page == {"items": []}


@pytest.mark.integration
class TestAdminWorkflow:
    """Login, edit and logout flows"""

    def test_login_edit_logout(self, client, create_quote, auth_config):
        """Test the cookie issued at login authorizes edits"""
        created = create_quote(title="draft", hashtags=["old"])

        login = client.post("/auth/login", json={"password": auth_config.admin_password})
        assert login.status_code == 200
        assert client.get("/auth/session").json() == {"isAdmin": True}

        updated = client.patch(f"/quotes/{created['id']}", json={"hashtags": "#new, #tags"})
        assert updated.status_code == 200
        assert updated.json()["hashtags"] == ["new", "tags"]

        assert client.delete(f"/quotes/{created['id']}").status_code == 200

        client.post("/auth/logout")
        client.cookies.clear()
        assert client.get("/auth/session").json() == {"isAdmin": False}

    def test_expired_token_rejected(self, client, create_quote, auth_config):
        created = create_quote()
        issued = now_millis() - SESSION_MAX_AGE_MS - 60_000
        token = create_token(auth_config.signing_secret, now_ms=issued)
        headers = {"Cookie": f"{auth_config.cookie_name}={token}"}

        assert client.get("/auth/session", headers=headers).json() == {"isAdmin": False}
        assert client.delete(f"/quotes/{created['id']}", headers=headers).status_code == 401

    def test_tampered_token_rejected(self, client, create_quote, auth_config):
        created = create_quote()
        token = create_token("not-the-secret")
        headers = {"Cookie": f"{auth_config.cookie_name}={token}"}

        assert client.get("/auth/session", headers=headers).json() == {"isAdmin": False}
        response = client.patch(f"/quotes/{created['id']}", json={"title": "hacked"}, headers=headers)
        assert response.status_code == 401
        assert client.get(f"/quotes/{created['id']}").json()["title"] == created["title"]

    def test_fresh_token_accepted(self, client, admin_headers):
        assert client.get("/auth/session", headers=admin_headers).json() == {"isAdmin": True}
