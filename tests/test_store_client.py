"""Unit tests for content/store.py and auth/identity.py -- the HTTP clients.

The requests session is replaced with a MagicMock; no network traffic.
Tests focus on:
- request shape (URL, auth header, base64 body, version token, branch)
- translation of store statuses into the service error taxonomy
- provider error bodies never leaking into error messages
"""

import base64
import json
from unittest.mock import MagicMock

import pytest
import requests

from auth.identity import IdentityClient
from content.store import ContentStore
from core.errors import Conflict, Forbidden, InvalidCredential, NotFound, Unavailable


def _resp(status: int, body=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.content = b"" if body is None else json.dumps(body).encode()
    resp.json.return_value = body
    return resp


@pytest.fixture
def client() -> ContentStore:
    c = ContentStore("https://api.example", "institute", "materials", branch="main")
    c._session = MagicMock()
    return c


class TestReads:
    def test_get_decodes_content(self, client):
        doc = {"super_admins": ["alice"], "admins": []}
        client._session.request.return_value = _resp(
            200,
            {
                "path": "admins/admins.json",
                "name": "admins.json",
                "type": "file",
                "sha": "abc123",
                "size": 42,
                "content": base64.b64encode(json.dumps(doc).encode()).decode(),
            },
        )
        obj = client.get("admins/admins.json", "tok")
        assert obj.version == "abc123"
        assert json.loads(obj.content) == doc

        method, url = client._session.request.call_args.args
        kwargs = client._session.request.call_args.kwargs
        assert method == "GET"
        assert url == "https://api.example/repos/institute/materials/contents/admins/admins.json"
        assert kwargs["headers"]["Authorization"] == "token tok"
        assert kwargs["params"] == {"ref": "main"}

    def test_anonymous_read_sends_no_auth_header(self, client):
        client._session.request.return_value = _resp(200, [])
        client.list_dir("notes")
        assert "Authorization" not in client._session.request.call_args.kwargs["headers"]

    def test_list_dir_maps_entries(self, client):
        client._session.request.return_value = _resp(
            200,
            [
                {"path": "notes/class-10", "name": "class-10", "type": "dir", "sha": "d1"},
                {"path": "notes/a.pdf", "name": "a.pdf", "type": "file", "sha": "f1", "size": 9, "download_url": "u"},
            ],
        )
        items = client.list_dir("notes")
        assert [(i.name, i.type) for i in items] == [("class-10", "dir"), ("a.pdf", "file")]
        assert items[1].size == 9
        assert items[1].download_url == "u"

    def test_probe_returns_metadata_without_content(self, client):
        resp = _resp(200, {"path": "notes/a.pdf", "name": "a.pdf", "type": "file", "sha": "v9", "size": 3, "content": "JVBERg=="})
        client._session.request.return_value = resp
        obj = client.probe("notes/a.pdf", "tok")
        assert obj.version == "v9"
        assert obj.content is None

    def test_probe_missing_returns_none(self, client):
        client._session.request.return_value = _resp(404, {"message": "Not Found"})
        assert client.probe("notes/x.pdf", "tok") is None


class TestWrites:
    def test_put_sends_base64_and_version(self, client):
        client._session.request.return_value = _resp(
            200,
            {
                "content": {"path": "notes/a.pdf", "name": "a.pdf", "sha": "new", "download_url": "d", "html_url": "h"},
                "commit": {"sha": "c1", "html_url": "https://store/c1"},
            },
        )
        result = client.put("notes/a.pdf", b"%PDF", "msg", "tok", expected_version="old")
        body = client._session.request.call_args.kwargs["json"]
        assert body == {"message": "msg", "content": base64.b64encode(b"%PDF").decode(), "branch": "main", "sha": "old"}
        assert result.object.version == "new"
        assert result.commit.sha == "c1"
        assert result.commit.url == "https://store/c1"

    def test_put_create_omits_sha(self, client):
        client._session.request.return_value = _resp(201, {"content": {"sha": "n"}, "commit": {"sha": "c"}})
        client.put("notes/a.pdf", b"%PDF", "msg", "tok")
        assert "sha" not in client._session.request.call_args.kwargs["json"]

    def test_delete_sends_version(self, client):
        client._session.request.return_value = _resp(200, {"commit": {"sha": "c2"}})
        commit = client.delete("notes/a.pdf", "msg", "v1", "tok")
        assert client._session.request.call_args.args[0] == "DELETE"
        assert client._session.request.call_args.kwargs["json"]["sha"] == "v1"
        assert commit.sha == "c2"


class TestErrorTranslation:
    @pytest.mark.parametrize(
        ("status", "error"),
        [(404, NotFound), (409, Conflict), (401, InvalidCredential), (403, Forbidden), (500, Unavailable), (502, Unavailable)],
    )
    def test_status_mapping(self, client, status, error):
        client._session.request.return_value = _resp(status, {"message": "provider secret detail"})
        with pytest.raises(error) as exc:
            client.put("notes/a.pdf", b"x", "m", "tok", expected_version="v")
        assert "provider secret detail" not in exc.value.message

    def test_422_on_create_is_conflict(self, client):
        client._session.request.return_value = _resp(422, {"message": "sha wasn't supplied"})
        with pytest.raises(Conflict):
            client.put("notes/a.pdf", b"x", "m", "tok")

    def test_422_on_update_is_unavailable(self, client):
        client._session.request.return_value = _resp(422, {"message": "bad"})
        with pytest.raises(Unavailable):
            client.put("notes/a.pdf", b"x", "m", "tok", expected_version="v")

    def test_transport_error_is_unavailable(self, client):
        client._session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(Unavailable):
            client.get("notes/a.pdf")


class TestIdentityClient:
    @pytest.fixture
    def ident(self) -> IdentityClient:
        c = IdentityClient("https://api.example")
        c._session = MagicMock()
        return c

    def test_whoami(self, ident):
        ident._session.get.return_value = _resp(200, {"login": "Alice", "avatar_url": "https://a/1"})
        profile = ident.whoami("tok")
        assert profile.username == "Alice"
        assert profile.avatar_url == "https://a/1"
        assert ident._session.get.call_args.args[0] == "https://api.example/user"

    def test_whoami_rejected(self, ident):
        ident._session.get.return_value = _resp(401, {"message": "Bad credentials"})
        with pytest.raises(InvalidCredential):
            ident.whoami("tok")

    def test_whoami_provider_outage_is_not_a_bad_credential(self, ident):
        ident._session.get.return_value = _resp(502, None)
        with pytest.raises(Unavailable):
            ident.whoami("tok")

    def test_whoami_transport_error(self, ident):
        ident._session.get.side_effect = requests.Timeout("slow")
        with pytest.raises(Unavailable):
            ident.whoami("tok")

    @pytest.mark.parametrize(("status", "expected"), [(200, True), (404, False)])
    def test_exists(self, ident, status, expected):
        ident._session.get.return_value = _resp(status, {"login": "carol"})
        assert ident.exists("carol", "tok") is expected

    def test_exists_unexpected_status(self, ident):
        ident._session.get.return_value = _resp(503, None)
        with pytest.raises(Unavailable):
            ident.exists("carol", "tok")
