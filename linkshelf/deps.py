from typing import Optional

from fastapi import Depends, Header, Request

from linkshelf.config import settings
from linkshelf.errors import AuthRequiredError
from linkshelf.services.fetcher import Fetcher, fetch_page
from linkshelf.services.identity import IdentityProvider, StaticTokenIdentity
from linkshelf.services.store import ItemStore


def get_store(request: Request) -> ItemStore:
    return request.app.state.store


def get_identity() -> IdentityProvider:
    return StaticTokenIdentity(settings.api_tokens)


def get_html_fetcher() -> Fetcher:
    return fetch_page


def get_oembed_fetcher() -> Fetcher:
    return fetch_page


async def get_current_owner(
    authorization: Optional[str] = Header(default=None),
    identity: IdentityProvider = Depends(get_identity),
) -> str:
    """Return the owner id for the ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthRequiredError("Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthRequiredError("Malformed Authorization header")

    owner_id = identity.owner_for_token(token.strip())
    if not owner_id:
        raise AuthRequiredError("Invalid or expired token")
    return owner_id
