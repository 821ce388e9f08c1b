"""
Geode Discord Bot - Mod Index Client
====================================

aiohttp client for the Geode mod index API.

DESIGN:
    Every call takes the user's bearer token explicitly; the client
    holds no per-user state. Non-2xx responses become IndexAPIError
    whose message is ready to show: "❌ <context>: `<error>`." when
    the body carries an "error" field, "❌ <context>." otherwise.
    Transport failures are reported the same way, without a body.
"""

import io
import json
import zipfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

from src.core.constants import (
    INDEX_DOWNLOAD_TIMEOUT,
    INDEX_REQUEST_TIMEOUT,
    INDEX_USER_AGENT,
)
from src.core.exceptions import IndexAPIError, MessageError
from src.core.logger import logger
from src.utils.retry import HTTP_RETRYABLE_EXCEPTIONS, retry_async


# =============================================================================
# Error Contexts
# =============================================================================

LOGIN_CONTEXT = "An error occurred while logging in"
INVALIDATE_TOKEN_CONTEXT = "An error occurred while invalidating the token"
INVALIDATE_TOKENS_CONTEXT = "An error occurred while invalidating tokens"
RENAME_CONTEXT = "An error occurred while updating your display name"
CREATE_MOD_CONTEXT = "An error occurred while creating your mod"
UPDATE_MOD_CONTEXT = "An error occurred while updating your mod"
ADD_DEV_CONTEXT = "An error occurred while adding the developer"
REMOVE_DEV_CONTEXT = "An error occurred while removing the developer"
MY_MODS_CONTEXT = {
    "pending": "An error occurred while getting your pending mods",
    "accepted": "An error occurred while getting your published mods",
}
ADMIN_CHECK_CONTEXT = "An error occurred while checking your admin status"
DEVELOPER_CONTEXT = "An error occurred while getting the developer data"
VERSION_STATUS_CONTEXT = "An error occurred while updating the mod version status"
PENDING_MODS_CONTEXT = "An error occurred while getting the pending mods"
PENDING_VERSION_CONTEXT = "An error occurred while getting the pending mod version"

DOWNLOAD_FAILED = "❌ An error occurred while downloading your mod."
MISSING_MOD_JSON = "❌ Your mod does not contain a mod.json file."
MISSING_MOD_ID = "❌ Your mod.json file is missing the \"id\" field."


def format_error(context: str, body: Any = None) -> str:
    """User-facing text for a failed index request."""
    if isinstance(body, dict) and body.get("error") is not None:
        return f"❌ {context}: `{body['error']}`."
    return f"❌ {context}."


def read_mod_id(data: bytes) -> str:
    """
    Read the mod id from a .geode package.

    Raises:
        MessageError: If the file is not a zip, has no mod.json, or
            mod.json has no "id".
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            try:
                raw = archive.read("mod.json")
            except KeyError:
                raise MessageError(MISSING_MOD_JSON)
    except zipfile.BadZipFile:
        raise MessageError(DOWNLOAD_FAILED)

    try:
        mod_json = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise MessageError(MISSING_MOD_ID)

    if not isinstance(mod_json, dict) or mod_json.get("id") is None:
        raise MessageError(MISSING_MOD_ID)
    return str(mod_json["id"])


# =============================================================================
# Models
# =============================================================================

@dataclass
class ModVersion:
    name: str
    version: str


@dataclass
class IndexMod:
    """The parts of a mod listing the paginator shows."""
    id: str
    featured: bool = False
    versions: List[ModVersion] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.versions[0].name if self.versions else self.id

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "IndexMod":
        return cls(
            id=str(data["id"]),
            featured=bool(data.get("featured", False)),
            versions=[
                ModVersion(name=str(v.get("name", "")), version=str(v.get("version", "")))
                for v in data.get("versions") or []
            ],
        )


@dataclass
class ModDependency:
    mod_id: str
    version: str
    importance: str

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ModDependency":
        return cls(
            mod_id=str(data["mod_id"]),
            version=str(data.get("version", "")),
            importance=str(data.get("importance", "")),
        )

    def __str__(self) -> str:
        return f"{self.mod_id} {self.version} ({self.importance})"


@dataclass
class ModDeveloper:
    id: int
    username: str
    display_name: str
    is_owner: bool = False


@dataclass
class PendingMod:
    """
    A mod awaiting review, with the details of its pending version.

    `gd` maps platform keys ("win", "android32", ...) to the Geometry
    Dash version the build targets.
    """
    id: str
    name: str
    version: str
    description: str = ""
    featured: bool = False
    repository: Optional[str] = None
    developers: List[ModDeveloper] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    links: Dict[str, Optional[str]] = field(default_factory=dict)
    download_link: str = ""
    hash: str = ""
    geode: str = ""
    gd: Dict[str, Optional[str]] = field(default_factory=dict)
    early_load: bool = False
    api: bool = False
    dependencies: List[ModDependency] = field(default_factory=list)
    incompatibilities: List[ModDependency] = field(default_factory=list)

    @classmethod
    def from_payload(cls, mod: Dict[str, Any], version: Dict[str, Any]) -> "PendingMod":
        return cls(
            id=str(mod["id"]),
            name=str(version.get("name") or mod["id"]),
            version=str(version["version"]),
            description=str(version.get("description") or ""),
            featured=bool(mod.get("featured", False)),
            repository=mod.get("repository"),
            developers=[
                ModDeveloper(
                    id=int(d["id"]),
                    username=str(d["username"]),
                    display_name=str(d.get("display_name") or d["username"]),
                    is_owner=bool(d.get("is_owner", False)),
                )
                for d in mod.get("developers") or []
            ],
            tags=[str(t) for t in mod.get("tags") or []],
            links=dict(mod.get("links") or {}),
            download_link=str(version.get("direct_download_link") or ""),
            hash=str(version.get("hash") or ""),
            geode=str(version.get("geode") or ""),
            gd=dict(version.get("gd") or {}),
            early_load=bool(version.get("early_load", False)),
            api=bool(version.get("api", False)),
            dependencies=[ModDependency.from_payload(d) for d in version.get("dependencies") or []],
            incompatibilities=[ModDependency.from_payload(d) for d in version.get("incompatibilities") or []],
        )


@dataclass
class PendingPage:
    """One page of the review queue; `page` is one-based."""
    mod: PendingMod
    page: int
    total: int


# =============================================================================
# Client
# =============================================================================

class IndexClient:
    """
    Thin wrapper over the index REST endpoints.

    Attributes:
        session: Shared aiohttp session, owned by the bot.
        api_url: API base URL without trailing slash.
        website_url: Website base URL without trailing slash.
    """

    def __init__(self, session: aiohttp.ClientSession, api_url: str, website_url: str) -> None:
        self.session = session
        self.api_url = api_url.rstrip("/")
        self.website_url = website_url.rstrip("/")

    def api(self, path: str) -> str:
        return f"{self.api_url}{path}"

    def website(self, path: str) -> str:
        return f"{self.website_url}{path}"

    def mod_logo_url(self, mod_id: str) -> str:
        return self.api(f"/v1/mods/{mod_id}/logo")

    def mod_page_url(self, mod_id: str) -> str:
        return self.website(f"/mods/{mod_id}")

    # =========================================================================
    # Transport
    # =========================================================================

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> Any:
        try:
            return await response.json(content_type=None)
        except (aiohttp.ContentTypeError, json.JSONDecodeError, ValueError):
            return None

    async def _request(
        self,
        method: str,
        path: str,
        token: str,
        context: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send an authenticated request.

        Returns:
            The decoded JSON body (None if empty or not JSON).

        Raises:
            IndexAPIError: On non-2xx responses or transport failures.
        """
        headers = {
            "Authorization": f"Bearer {token}",
            "User-Agent": INDEX_USER_AGENT,
        }
        try:
            async with self.session.request(
                method,
                self.api(path),
                headers=headers,
                json=payload,
                params=params,
                timeout=aiohttp.ClientTimeout(total=INDEX_REQUEST_TIMEOUT),
            ) as response:
                body = await self._read_json(response)
                if response.status >= 400:
                    logger.warning("Index Request Failed", [
                        ("Request", f"{method} {path}"),
                        ("Status", str(response.status)),
                        ("Error", str(body.get("error") if isinstance(body, dict) else body)[:100]),
                    ])
                    raise IndexAPIError(format_error(context, body), status=response.status)
                return body
        except aiohttp.ClientError as e:
            logger.warning("Index Request Error", [
                ("Request", f"{method} {path}"),
                ("Error", f"{type(e).__name__}: {str(e)[:80]}"),
            ])
            raise IndexAPIError(format_error(context))
        except TimeoutError:
            logger.warning("Index Request Timed Out", [
                ("Request", f"{method} {path}"),
            ])
            raise IndexAPIError(format_error(context))

    # =========================================================================
    # Account
    # =========================================================================

    async def get_me(self, token: str) -> Dict[str, Any]:
        """The logged-in developer's profile payload."""
        body = await self._request("GET", "/v1/me", token, LOGIN_CONTEXT)
        if not isinstance(body, dict) or body.get("payload") is None:
            raise IndexAPIError("❌ An error occurred while parsing the user response.")
        return body["payload"]

    async def update_display_name(self, token: str, name: str) -> None:
        await self._request("PUT", "/v1/me", token, RENAME_CONTEXT, payload={"display_name": name})

    async def invalidate_token(self, token: str) -> None:
        """Invalidate only this token."""
        await self._request("DELETE", "/v1/me/token", token, INVALIDATE_TOKEN_CONTEXT)

    async def invalidate_all_tokens(self, token: str) -> None:
        await self._request("DELETE", "/v1/me/tokens", token, INVALIDATE_TOKENS_CONTEXT)

    # =========================================================================
    # Mods
    # =========================================================================

    async def create_mod(self, token: str, download_link: str) -> None:
        await self._request("POST", "/v1/mods", token, CREATE_MOD_CONTEXT, payload={"download_link": download_link})

    async def create_version(self, token: str, mod_id: str, download_link: str) -> None:
        await self._request(
            "POST", f"/v1/mods/{mod_id}/versions", token, UPDATE_MOD_CONTEXT,
            payload={"download_link": download_link},
        )

    async def add_developer(self, token: str, mod_id: str, username: str) -> None:
        await self._request(
            "POST", f"/v1/mods/{mod_id}/developers", token, ADD_DEV_CONTEXT,
            payload={"username": username},
        )

    async def remove_developer(self, token: str, mod_id: str, username: str) -> None:
        await self._request("DELETE", f"/v1/mods/{mod_id}/developers/{username}", token, REMOVE_DEV_CONTEXT)

    async def get_my_mods(self, token: str, status: str) -> List[IndexMod]:
        """
        The developer's mods with the given status ("pending" or "accepted").

        Raises:
            IndexAPIError: On request failure or an unreadable payload.
        """
        label = "published" if status == "accepted" else status
        body = await self._request("GET", "/v1/me/mods", token, MY_MODS_CONTEXT[status], params={"status": status})
        payload = body.get("payload") if isinstance(body, dict) else None
        if not isinstance(payload, list):
            raise IndexAPIError(f"❌ An error occurred while parsing your {label} mods response.")
        try:
            return [IndexMod.from_payload(item) for item in payload]
        except (KeyError, TypeError, AttributeError):
            raise IndexAPIError(f"❌ An error occurred while parsing your {label} mods response.")

    # =========================================================================
    # Administration
    # =========================================================================

    async def is_admin(self, token: str) -> bool:
        """Whether the token belongs to an index administrator."""
        body = await self._request("GET", "/v1/me", token, ADMIN_CHECK_CONTEXT)
        payload = body.get("payload") if isinstance(body, dict) else None
        if not isinstance(payload, dict) or payload.get("admin") is None:
            raise IndexAPIError("❌ An error occurred while parsing your user response.")
        return bool(payload["admin"])

    async def find_developer(self, token: str, query: str) -> Dict[str, Any]:
        """
        The first developer matching a search query.

        Raises:
            IndexAPIError: On request failure or when nobody matches.
        """
        body = await self._request("GET", "/v1/developers", token, DEVELOPER_CONTEXT, params={"query": query})
        payload = body.get("payload") if isinstance(body, dict) else None
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise IndexAPIError("❌ An error occurred while parsing the developer response.")
        return data[0]

    async def set_developer_verified(self, token: str, developer_id: Any, verified: bool) -> None:
        prefix = "" if verified else "un"
        await self._request(
            "PUT", f"/v1/developers/{developer_id}", token,
            f"An error occurred while {prefix}verifying the developer",
            payload={"verified": verified},
        )

    async def update_version_status(
        self,
        token: str,
        mod_id: str,
        version: str,
        status: str,
        reason: Optional[str] = None,
        context: str = VERSION_STATUS_CONTEXT,
    ) -> None:
        """Move a mod version to another review status."""
        await self._request(
            "PUT", f"/v1/mods/{mod_id}/versions/{version}", token, context,
            payload={"status": status, "info": reason},
        )

    async def get_pending_page(self, token: str, page: int) -> Optional[PendingPage]:
        """
        One mod of the review queue, with its pending version's details.

        Pages past the end fall back to the last page, since reviewing
        a mod shrinks the queue under the reviewer.

        Returns:
            The page, or None when nothing is pending.
        """
        page = max(page, 1)
        while True:
            body = await self._request(
                "GET", "/v1/mods", token, PENDING_MODS_CONTEXT,
                params={"status": "pending", "page": str(page), "per_page": "1"},
            )
            payload = body.get("payload") if isinstance(body, dict) else None
            data = payload.get("data") if isinstance(payload, dict) else None
            if not isinstance(data, list):
                raise IndexAPIError("❌ An error occurred while parsing the pending mods response.")
            total = int(payload.get("count") or 0)
            if data:
                break
            if page <= 1 or total <= 0:
                return None
            page = min(page - 1, total)

        mod = data[0]
        try:
            version_name = mod["versions"][0]["version"]
        except (KeyError, IndexError, TypeError):
            raise IndexAPIError("❌ An error occurred while parsing the pending mod data.")

        body = await self._request(
            "GET", f"/v1/mods/{mod['id']}/versions/{version_name}", token, PENDING_VERSION_CONTEXT,
        )
        version = body.get("payload") if isinstance(body, dict) else None
        if not isinstance(version, dict):
            raise IndexAPIError("❌ An error occurred while parsing the pending mod version response.")

        try:
            pending = PendingMod.from_payload(mod, version)
        except (KeyError, TypeError, ValueError):
            raise IndexAPIError("❌ An error occurred while parsing the pending mod data.")
        return PendingPage(mod=pending, page=page, total=max(total, page))

    # =========================================================================
    # Packages
    # =========================================================================

    async def _download(self, url: str) -> bytes:
        async with self.session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=INDEX_DOWNLOAD_TIMEOUT),
        ) as response:
            if response.status >= 400:
                raise MessageError(DOWNLOAD_FAILED)
            return await response.read()

    async def download_mod_id(self, download_link: str) -> str:
        """
        Download a .geode package and read its mod id.

        Raises:
            MessageError: If the download fails or the package is malformed.
        """
        try:
            data = await retry_async(
                self._download,
                download_link,
                max_retries=2,
                base_delay=1.0,
                exceptions=HTTP_RETRYABLE_EXCEPTIONS,
            )
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.warning("Mod Download Failed", [
                ("URL", download_link[:100]),
                ("Error", f"{type(e).__name__}: {str(e)[:80]}"),
            ])
            raise MessageError(DOWNLOAD_FAILED)
        return read_mod_id(data)


__all__ = [
    "IndexClient",
    "IndexMod",
    "ModVersion",
    "ModDependency",
    "ModDeveloper",
    "PendingMod",
    "PendingPage",
    "format_error",
    "read_mod_id",
    "DOWNLOAD_FAILED",
    "MISSING_MOD_JSON",
    "MISSING_MOD_ID",
]
