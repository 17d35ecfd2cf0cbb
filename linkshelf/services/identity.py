from typing import Mapping, Optional, Protocol


class IdentityProvider(Protocol):
    def owner_for_token(self, token: str) -> Optional[str]: ...


class StaticTokenIdentity:
    """Maps opaque bearer tokens to owner ids from a fixed table (see ``Settings.api_tokens``)."""

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = dict(tokens)

    def owner_for_token(self, token: str) -> Optional[str]:
        if not token:
            return None
        return self._tokens.get(token)
