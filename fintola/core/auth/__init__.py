"""Identity provider integration."""

from fintola.core.auth.metadata import (
    ClerkMetadataStore,
    InMemoryMetadataStore,
    UserMetadataStore,
    deep_merge,
    get_user_metadata,
    update_user_metadata,
)
from fintola.core.auth.session import (
    SESSION_ID_HEADER,
    USER_ID_HEADER,
    Authenticator,
    ClerkSessionAuthenticator,
    HeaderAuthenticator,
)

__all__ = [
    "ClerkMetadataStore",
    "InMemoryMetadataStore",
    "UserMetadataStore",
    "deep_merge",
    "get_user_metadata",
    "update_user_metadata",
    "SESSION_ID_HEADER",
    "USER_ID_HEADER",
    "Authenticator",
    "ClerkSessionAuthenticator",
    "HeaderAuthenticator",
]
