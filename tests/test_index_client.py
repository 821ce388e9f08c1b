"""
Geode Discord Bot - Mod Index Tests
===================================

Tests for the index API client, the mod paginator and the admin commands.
"""

import io
import json
import zipfile
from unittest.mock import AsyncMock

import aiohttp
import pytest

from src.commands.index.admin_views import (
    NO_PENDING_MODS,
    UNAUTHORIZED_RESPONSES,
    ModStatusModal,
    PendingReviewView,
    build_pending_embed,
)
from src.commands.index.cog import IndexCog
from src.commands.index.views import LOGIN_REQUIRED, ModPaginatorView, build_mod_embed, select_window
from src.core.exceptions import IndexAPIError, MessageError
from src.services.index_api import (
    DOWNLOAD_FAILED,
    MISSING_MOD_ID,
    MISSING_MOD_JSON,
    IndexClient,
    IndexMod,
    PendingMod,
    PendingPage,
    format_error,
    read_mod_id,
)


# =============================================================================
# Fakes
# =============================================================================

class FakeResponse:
    """Just enough of aiohttp.ClientResponse for the client."""

    def __init__(self, status=200, body=None, data=b""):
        self.status = status
        self._body = body
        self._data = data

    async def json(self, content_type=None):
        if self._body is None:
            raise ValueError("no json")
        return self._body

    async def read(self):
        return self._data

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Records requests; answers from `responses` in order, then with `response`."""

    def __init__(self, response=None, error=None, responses=()):
        self.response = response or FakeResponse()
        self.error = error
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return self.response

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)


def _client(session):
    return IndexClient(session, "https://api.geode-sdk.org/", "https://geode-sdk.org")


def _package(files):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def _mod(mod_id, name="Mod", featured=False, versions=("1.0.0",)):
    return IndexMod.from_payload({
        "id": mod_id,
        "featured": featured,
        "versions": [{"name": name, "version": v} for v in versions],
    })


def _me(admin):
    return FakeResponse(body={"payload": {"display_name": "fod", "admin": admin}})


def _pending_list(count=1, mod_id="a.b", empty=False):
    data = [] if empty else [{
        "id": mod_id,
        "featured": True,
        "repository": "https://github.com/fod/ab",
        "developers": [
            {"id": 1, "username": "fod", "display_name": "Fod", "is_owner": True},
            {"id": 2, "username": "cvolton", "display_name": "Cvolton", "is_owner": False},
        ],
        "tags": ["gameplay", "online"],
        "links": {"community": "https://discord.gg/ab", "homepage": None, "source": None},
        "versions": [{"version": "1.0.0"}],
    }]
    return FakeResponse(body={"payload": {"data": data, "count": count}})


def _pending_version(version="1.0.0"):
    return FakeResponse(body={"payload": {
        "name": "AB",
        "version": version,
        "description": "Does things.",
        "direct_download_link": "https://example.com/a.b.geode",
        "hash": "abc123",
        "geode": "4.0.0",
        "gd": {"win": "2.206", "android64": "2.206"},
        "early_load": True,
        "api": False,
        "dependencies": [{"mod_id": "geode.node-ids", "version": ">=v1.0.0", "importance": "required"}],
        "incompatibilities": [],
    }})


# =============================================================================
# Helpers
# =============================================================================

class TestFormatError:
    """Tests for user-facing error text."""

    def test_with_error_field(self):
        """Test that the API's error is quoted."""
        assert format_error("An error occurred while logging in", {"error": "invalid token"}) == (
            "❌ An error occurred while logging in: `invalid token`."
        )

    def test_without_body(self):
        """Test the short form."""
        assert format_error("An error occurred while logging in") == "❌ An error occurred while logging in."
        assert format_error("ctx", ["not", "a", "dict"]) == "❌ ctx."


class TestReadModId:
    """Tests for reading mod.json out of a package."""

    def test_reads_id(self):
        """Test a well-formed package."""
        data = _package({"mod.json": json.dumps({"id": "geode.node-ids", "version": "v1.0.0"})})
        assert read_mod_id(data) == "geode.node-ids"

    def test_not_a_zip(self):
        """Test a download that isn't a package."""
        with pytest.raises(MessageError) as exc:
            read_mod_id(b"<html>not found</html>")
        assert exc.value.message == DOWNLOAD_FAILED

    def test_missing_mod_json(self):
        """Test a package without mod.json."""
        with pytest.raises(MessageError) as exc:
            read_mod_id(_package({"logo.png": b"png"}))
        assert exc.value.message == MISSING_MOD_JSON

    def test_missing_id(self):
        """Test a mod.json without an id."""
        with pytest.raises(MessageError) as exc:
            read_mod_id(_package({"mod.json": json.dumps({"name": "x"})}))
        assert exc.value.message == MISSING_MOD_ID

    def test_invalid_json(self):
        """Test a mod.json that doesn't parse."""
        with pytest.raises(MessageError) as exc:
            read_mod_id(_package({"mod.json": "{broken"}))
        assert exc.value.message == MISSING_MOD_ID


class TestIndexMod:
    """Tests for the mod listing model."""

    def test_from_payload(self):
        """Test parsing a listing."""
        mod = _mod("geode.loader", name="Geode", featured=True, versions=("2.0.0", "1.0.0"))
        assert mod.name == "Geode"
        assert mod.featured is True
        assert [v.version for v in mod.versions] == ["2.0.0", "1.0.0"]

    def test_name_falls_back_to_id(self):
        """Test a mod without versions."""
        assert IndexMod.from_payload({"id": "a.b"}).name == "a.b"


# =============================================================================
# Client
# =============================================================================

class TestIndexClient:
    """Tests for API requests."""

    async def test_get_me_sends_token(self):
        """Test the bearer token and URL."""
        session = FakeSession(FakeResponse(body={"payload": {"display_name": "fod"}}))
        payload = await _client(session).get_me("secret")

        assert payload == {"display_name": "fod"}
        method, url, kwargs = session.calls[0]
        assert (method, url) == ("GET", "https://api.geode-sdk.org/v1/me")
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

    async def test_error_status(self):
        """Test that API errors carry the formatted message and status."""
        session = FakeSession(FakeResponse(status=401, body={"error": "invalid token"}))
        with pytest.raises(IndexAPIError) as exc:
            await _client(session).get_me("bad")
        assert exc.value.message == "❌ An error occurred while logging in: `invalid token`."
        assert exc.value.status == 401

    async def test_error_without_body(self):
        """Test an error response with no JSON."""
        session = FakeSession(FakeResponse(status=500))
        with pytest.raises(IndexAPIError) as exc:
            await _client(session).invalidate_all_tokens("t")
        assert exc.value.message == "❌ An error occurred while invalidating tokens."

    async def test_connection_error(self):
        """Test that transport failures become index errors."""
        session = FakeSession(error=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(IndexAPIError) as exc:
            await _client(session).create_mod("t", "https://example.com/a.geode")
        assert exc.value.message == "❌ An error occurred while creating your mod."

    async def test_get_me_unparseable(self):
        """Test a success response without a payload."""
        session = FakeSession(FakeResponse(body={"nope": 1}))
        with pytest.raises(IndexAPIError, match="parsing the user response"):
            await _client(session).get_me("t")

    async def test_get_my_mods(self):
        """Test listing mods with a status filter."""
        body = {"payload": [{"id": "a.b", "featured": False, "versions": [{"name": "AB", "version": "1.0.0"}]}]}
        session = FakeSession(FakeResponse(body=body))

        mods = await _client(session).get_my_mods("t", "accepted")

        assert [m.id for m in mods] == ["a.b"]
        assert session.calls[0][2]["params"] == {"status": "accepted"}

    async def test_get_my_mods_bad_payload(self):
        """Test an unreadable mod list."""
        session = FakeSession(FakeResponse(body={"payload": {"id": "a.b"}}))
        with pytest.raises(IndexAPIError, match="parsing your pending mods response"):
            await _client(session).get_my_mods("t", "pending")

    async def test_remove_developer_path(self):
        """Test the developer removal endpoint."""
        session = FakeSession(FakeResponse(status=204))
        await _client(session).remove_developer("t", "a.b", "someone")
        assert session.calls[0][:2] == ("DELETE", "https://api.geode-sdk.org/v1/mods/a.b/developers/someone")

    async def test_download_mod_id(self):
        """Test reading the id from a downloaded package."""
        data = _package({"mod.json": json.dumps({"id": "a.b"})})
        session = FakeSession(FakeResponse(data=data))
        assert await _client(session).download_mod_id("https://example.com/a.geode") == "a.b"

    async def test_download_failed(self):
        """Test a download that returns an error status."""
        session = FakeSession(FakeResponse(status=404))
        with pytest.raises(MessageError) as exc:
            await _client(session).download_mod_id("https://example.com/a.geode")
        assert exc.value.message == DOWNLOAD_FAILED


# =============================================================================
# Paginator
# =============================================================================

class TestPaginator:
    """Tests for the mod list pager."""

    def test_embed(self):
        """Test one page of the paginator."""
        client = _client(FakeSession())
        embed = build_mod_embed(client, _mod("a.b", "AB", featured=True, versions=("1.1.0", "1.0.0")), 0, 3, True)

        assert embed.title == "⭐️ AB"
        assert embed.url == "https://geode-sdk.org/mods/a.b"
        assert embed.fields[0].name == "Published versions"
        assert embed.fields[0].value == "`1.1.0`, `1.0.0`"
        assert embed.thumbnail.url == "https://api.geode-sdk.org/v1/mods/a.b/logo"
        assert embed.footer.text == "Page 1 of 3"

    def test_pending_embed(self):
        """Test the field name for pending mods."""
        embed = build_mod_embed(_client(FakeSession()), _mod("a.b"), 1, 2, False)
        assert embed.title == "Mod"
        assert embed.fields[0].name == "Pending versions"

    def test_select_window(self):
        """Test the select menu window stays within bounds."""
        assert select_window(3, 10) == range(10)
        assert select_window(0, 60) == range(0, 25)
        assert select_window(30, 60) == range(18, 43)
        assert select_window(59, 60) == range(35, 60)

    async def test_paging_wraps(self, mock_discord_interaction):
        """Test that next and previous wrap around."""
        view = ModPaginatorView(_client(FakeSession()), [_mod("a"), _mod("b"), _mod("c")], published=True)
        mock_discord_interaction.response.edit_message = AsyncMock()

        await view.previous_page.callback(mock_discord_interaction)
        assert view.page == 2

        await view.next_page.callback(mock_discord_interaction)
        assert view.page == 0

        embed = mock_discord_interaction.response.edit_message.call_args.kwargs["embed"]
        assert embed.footer.text == "Page 1 of 3"


# =============================================================================
# Administration
# =============================================================================

def _reply(interaction):
    return interaction.response.send_message.call_args.kwargs["content"]


@pytest.fixture
def admin_cog(mock_bot, test_db, mock_discord_interaction):
    """Build an IndexCog whose client answers with the given responses."""
    def make(*responses, logged_in=True):
        session = FakeSession(responses=responses)
        mock_bot.index_client = _client(session)
        if logged_in:
            test_db.set_index_token(mock_discord_interaction.user.id, "t")
        return IndexCog(mock_bot), session
    return make


class TestAdminClient:
    """Tests for the admin endpoints."""

    async def test_is_admin(self):
        """Test reading the admin flag."""
        assert await _client(FakeSession(_me(True))).is_admin("t") is True
        assert await _client(FakeSession(_me(False))).is_admin("t") is False

    async def test_is_admin_missing_flag(self):
        """Test a profile without the admin field."""
        session = FakeSession(FakeResponse(body={"payload": {"display_name": "fod"}}))
        with pytest.raises(IndexAPIError, match="parsing your user response"):
            await _client(session).is_admin("t")

    async def test_is_admin_error(self):
        """Test that a failed check carries its own context."""
        session = FakeSession(FakeResponse(status=401, body={"error": "invalid token"}))
        with pytest.raises(IndexAPIError) as exc:
            await _client(session).is_admin("t")
        assert exc.value.message == "❌ An error occurred while checking your admin status: `invalid token`."

    async def test_find_developer(self):
        """Test the developer search query."""
        body = {"payload": {"data": [{"id": 7, "display_name": "Fod", "verified": False}], "count": 1}}
        session = FakeSession(FakeResponse(body=body))

        dev = await _client(session).find_developer("t", "fod")

        assert dev["id"] == 7
        method, url, kwargs = session.calls[0]
        assert (method, url) == ("GET", "https://api.geode-sdk.org/v1/developers")
        assert kwargs["params"] == {"query": "fod"}

    async def test_find_developer_no_match(self):
        """Test a search with no results."""
        session = FakeSession(FakeResponse(body={"payload": {"data": [], "count": 0}}))
        with pytest.raises(IndexAPIError, match="parsing the developer response"):
            await _client(session).find_developer("t", "nobody")

    async def test_set_developer_verified(self):
        """Test the verification request."""
        session = FakeSession(FakeResponse(status=204))
        await _client(session).set_developer_verified("t", 7, False)

        method, url, kwargs = session.calls[0]
        assert (method, url) == ("PUT", "https://api.geode-sdk.org/v1/developers/7")
        assert kwargs["json"] == {"verified": False}

    async def test_set_developer_verified_error(self):
        """Test the unverify error text."""
        session = FakeSession(FakeResponse(status=500))
        with pytest.raises(IndexAPIError) as exc:
            await _client(session).set_developer_verified("t", 7, False)
        assert exc.value.message == "❌ An error occurred while unverifying the developer."

    async def test_update_version_status(self):
        """Test the status payload includes the reason."""
        session = FakeSession(FakeResponse(status=204))
        await _client(session).update_version_status("t", "a.b", "1.0.0", "rejected", "broken")

        method, url, kwargs = session.calls[0]
        assert (method, url) == ("PUT", "https://api.geode-sdk.org/v1/mods/a.b/versions/1.0.0")
        assert kwargs["json"] == {"status": "rejected", "info": "broken"}

    async def test_get_pending_page(self):
        """Test loading one mod of the queue with its version."""
        session = FakeSession(responses=[_pending_list(count=3), _pending_version()])

        current = await _client(session).get_pending_page("t", 1)

        assert (current.page, current.total) == (1, 3)
        assert current.mod.id == "a.b"
        assert current.mod.name == "AB"
        assert current.mod.download_link == "https://example.com/a.b.geode"
        assert session.calls[0][2]["params"] == {"status": "pending", "page": "1", "per_page": "1"}
        assert session.calls[1][1] == "https://api.geode-sdk.org/v1/mods/a.b/versions/1.0.0"

    async def test_get_pending_page_empty(self):
        """Test an empty queue."""
        session = FakeSession(responses=[_pending_list(count=0, empty=True)])
        assert await _client(session).get_pending_page("t", 1) is None

    async def test_get_pending_page_shrunk(self):
        """Test falling back to the last page after the queue shrinks."""
        session = FakeSession(responses=[
            _pending_list(count=2, empty=True),
            _pending_list(count=2),
            _pending_version(),
        ])

        current = await _client(session).get_pending_page("t", 3)

        assert (current.page, current.total) == (2, 2)
        assert session.calls[1][2]["params"]["page"] == "2"


class TestPendingEmbed:
    """Tests for the review card."""

    async def test_fields(self):
        """Test the pending mod's details."""
        session = FakeSession(responses=[_pending_list(count=4), _pending_version()])
        client = _client(session)
        current = await client.get_pending_page("t", 1)

        embed = build_pending_embed(client, current)
        fields = {f.name: f.value for f in embed.fields}

        assert embed.title == "⭐️ AB"
        assert embed.url == "https://geode-sdk.org/mods/a.b?version=1.0.0"
        assert embed.description == "Does things."
        assert embed.footer.text == "Page 1 of 4"
        assert fields["Early Load"] == "Yes"
        assert fields["API"] == "No"
        assert fields["Developers"] == (
            "[**Fod**](https://geode-sdk.org/mods?developer=fod), "
            "[Cvolton](https://geode-sdk.org/mods?developer=cvolton)"
        )
        assert fields["Geometry Dash"].splitlines() == [
            "Windows: 2.206",
            "Android (32-bit): N/A",
            "Android (64-bit): 2.206",
            "macOS (Intel): N/A",
            "macOS (ARM): N/A",
        ]
        assert fields["Dependencies"] == "`geode.node-ids >=v1.0.0 (required)`"
        assert fields["Incompatibilities"] == "None"
        assert fields["Source"] == "https://github.com/fod/ab"
        assert fields["Homepage"] == "N/A"
        assert fields["Hash"] == "`abc123`"
        assert fields["Tags"] == "`gameplay`, `online`"

    def test_unfeatured_title(self):
        """Test a mod that isn't featured."""
        mod = PendingMod.from_payload({"id": "a.b"}, {"name": "AB", "version": "1.0.0"})
        embed = build_pending_embed(_client(FakeSession()), PendingPage(mod=mod, page=1, total=1))
        assert embed.title == "AB"
        assert {f.name: f.value for f in embed.fields}["Developers"] == "None"


class TestAdminCommands:
    """Tests for /index admin."""

    async def test_requires_login(self, admin_cog, mock_discord_interaction):
        """Test that admin commands need a stored token."""
        cog, session = admin_cog(logged_in=False)
        await IndexCog.admin_verify.callback(cog, mock_discord_interaction, "fod", True)

        assert _reply(mock_discord_interaction) == LOGIN_REQUIRED
        assert session.calls == []

    async def test_requires_admin(self, admin_cog, mock_discord_interaction):
        """Test that non-admins are refused before anything changes."""
        cog, session = admin_cog(_me(False))
        await IndexCog.admin_pending.callback(cog, mock_discord_interaction)

        assert _reply(mock_discord_interaction) in UNAUTHORIZED_RESPONSES
        assert len(session.calls) == 1

    async def test_verify(self, admin_cog, mock_discord_interaction):
        """Test verifying a developer."""
        developers = FakeResponse(body={"payload": {"data": [{"id": 7, "display_name": "Fod", "verified": False}]}})
        cog, session = admin_cog(_me(True), developers, FakeResponse(status=204))

        await IndexCog.admin_verify.callback(cog, mock_discord_interaction, "fod", True)

        assert _reply(mock_discord_interaction) == "✅ Successfully verified developer **Fod**!"
        method, url, kwargs = session.calls[2]
        assert (method, url) == ("PUT", "https://api.geode-sdk.org/v1/developers/7")
        assert kwargs["json"] == {"verified": True}

    async def test_verify_already(self, admin_cog, mock_discord_interaction):
        """Test unverifying a developer who isn't verified."""
        developers = FakeResponse(body={"payload": {"data": [{"id": 7, "display_name": "Fod", "verified": False}]}})
        cog, session = admin_cog(_me(True), developers)

        await IndexCog.admin_verify.callback(cog, mock_discord_interaction, "fod", False)

        assert _reply(mock_discord_interaction) == "❌ Developer is already unverified."
        assert len(session.calls) == 2

    async def test_update(self, admin_cog, mock_discord_interaction):
        """Test changing a version's status with a reason."""
        cog, session = admin_cog(_me(True), FakeResponse(status=204))

        await IndexCog.admin_update.callback(
            cog, mock_discord_interaction, "a.b", "1.0.0", "rejected", "broken",
        )

        assert _reply(mock_discord_interaction) == "✅ Successfully rejected mod version **1.0.0**!"
        assert session.calls[1][2]["json"] == {"status": "rejected", "info": "broken"}

    async def test_update_pending_wording(self, admin_cog, mock_discord_interaction):
        """Test the reply for moving a version back to pending."""
        cog, _ = admin_cog(_me(True), FakeResponse(status=204))
        await IndexCog.admin_update.callback(cog, mock_discord_interaction, "a.b", "1.0.0", "pending")
        assert _reply(mock_discord_interaction) == "✅ Successfully set to pending mod version **1.0.0**!"

    async def test_update_unknown_status(self, admin_cog, mock_discord_interaction):
        """Test that a typed status outside the list is refused."""
        cog, session = admin_cog(_me(True))
        await IndexCog.admin_update.callback(cog, mock_discord_interaction, "a.b", "1.0.0", "approved")

        assert _reply(mock_discord_interaction).startswith("❌ Status must be one of")
        assert session.calls == []

    async def test_status_autocomplete(self, admin_cog, mock_discord_interaction):
        """Test status suggestions."""
        cog, _ = admin_cog()
        choices = await cog.status_autocomplete(mock_discord_interaction, "")
        assert [c.value for c in choices] == ["accepted", "pending", "rejected", "unlisted"]

        choices = await cog.status_autocomplete(mock_discord_interaction, "RE")
        assert [c.value for c in choices] == ["rejected"]

    async def test_pending_empty(self, admin_cog, mock_discord_interaction):
        """Test an empty review queue."""
        cog, _ = admin_cog(_me(True), _pending_list(count=0, empty=True))
        await IndexCog.admin_pending.callback(cog, mock_discord_interaction)
        assert _reply(mock_discord_interaction) == NO_PENDING_MODS

    async def test_pending(self, admin_cog, mock_discord_interaction):
        """Test opening the review queue."""
        cog, _ = admin_cog(_me(True), _pending_list(count=2), _pending_version())
        await IndexCog.admin_pending.callback(cog, mock_discord_interaction)

        kwargs = mock_discord_interaction.response.send_message.call_args.kwargs
        assert kwargs["ephemeral"] is True
        assert kwargs["embed"].footer.text == "Page 1 of 2"
        assert isinstance(kwargs["view"], PendingReviewView)


class TestPendingReview:
    """Tests for the review queue buttons and modal."""

    async def _view(self, test_db, interaction, *responses):
        test_db.set_index_token(interaction.user.id, "t")
        session = FakeSession(responses=[_pending_list(count=2), _pending_version(), *responses])
        client = _client(session)
        current = await client.get_pending_page("t", 1)
        interaction.edit_original_response = AsyncMock()
        return PendingReviewView(client, test_db, interaction.user.id, current), session

    async def test_next_wraps(self, test_db, mock_discord_interaction):
        """Test paging forward past the end returns to the first page."""
        view, session = await self._view(
            test_db, mock_discord_interaction,
            _pending_list(count=2, mod_id="c.d"), _pending_version(),
            _pending_list(count=2), _pending_version(),
        )

        await view.next_page.callback(mock_discord_interaction)
        assert view.current.page == 2
        assert view.current.mod.id == "c.d"

        await view.next_page.callback(mock_discord_interaction)
        assert view.current.page == 1
        assert session.calls[4][2]["params"]["page"] == "1"

        embed = mock_discord_interaction.edit_original_response.call_args.kwargs["embed"]
        assert embed.footer.text == "Page 1 of 2"

    async def test_other_user_refused(self, test_db, mock_discord_interaction):
        """Test that only the admin who opened the queue can use it."""
        view, _ = await self._view(test_db, mock_discord_interaction)
        view.owner_id = 42

        assert await view.interaction_check(mock_discord_interaction) is False
        assert _reply(mock_discord_interaction) == "❌ This is not your review queue."

    async def test_reject(self, test_db, mock_discord_interaction):
        """Test rejecting the shown version and landing on an empty queue."""
        view, session = await self._view(
            test_db, mock_discord_interaction,
            _me(True), FakeResponse(status=204), _pending_list(count=0, empty=True),
        )

        modal = ModStatusModal(view, "rejected")
        await modal.on_submit(mock_discord_interaction)

        method, url, kwargs = session.calls[3]
        assert (method, url) == ("PUT", "https://api.geode-sdk.org/v1/mods/a.b/versions/1.0.0")
        assert kwargs["json"] == {"status": "rejected", "info": None}
        edit = mock_discord_interaction.edit_original_response.call_args.kwargs
        assert edit["content"] == f"✅ Successfully rejected **AB 1.0.0**!\n{NO_PENDING_MODS}"
        assert edit["embed"] is None

    async def test_accept_revoked_admin(self, test_db, mock_discord_interaction):
        """Test that a reviewer who lost admin rights can't accept."""
        view, session = await self._view(test_db, mock_discord_interaction, _me(False))

        await ModStatusModal(view, "accepted").on_submit(mock_discord_interaction)

        sent = mock_discord_interaction.followup.send.call_args
        assert sent.args[0] in UNAUTHORIZED_RESPONSES
        assert len(session.calls) == 3
