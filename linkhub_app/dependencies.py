"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the key-value store and
blob storage, the services built on top of them, and the session
based user lookups the routes depend on.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (override get_store / get_blob_storage)
- Flexible (swap implementations via config)
"""

from functools import lru_cache
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status

from linkhub_app.blob.factory import BlobStorageFactory, BlobBackend
from linkhub_app.blob.strategies import BlobStorage
from linkhub_app.config import settings
from linkhub_app.models.user import User
from linkhub_app.services.admin_service import AdminService
from linkhub_app.services.auth_service import AuthService
from linkhub_app.services.link_service import LinkService
from linkhub_app.services.profile_service import ProfileService
from linkhub_app.store.factory import KeyValueStoreFactory, StoreBackend
from linkhub_app.store.strategies import KeyValueStore


@lru_cache()
def get_store() -> KeyValueStore:
    """
    Get key-value store instance (singleton).

    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = StoreBackend(settings.store_backend)
    return KeyValueStoreFactory.create(backend)


@lru_cache()
def get_blob_storage() -> BlobStorage:
    """Get blob storage instance (singleton)."""
    backend = BlobBackend(settings.blob_backend)
    return BlobStorageFactory.create(backend)


def get_auth_service(store: KeyValueStore = Depends(get_store)) -> AuthService:
    return AuthService(store)


def get_link_service(store: KeyValueStore = Depends(get_store)) -> LinkService:
    return LinkService(store)


def get_profile_service(
    store: KeyValueStore = Depends(get_store),
    blob_storage: BlobStorage = Depends(get_blob_storage)
) -> ProfileService:
    return ProfileService(store, blob_storage)


def get_admin_service(
    store: KeyValueStore = Depends(get_store),
    profile_service: ProfileService = Depends(get_profile_service)
) -> AdminService:
    return AdminService(store, profile_service)


async def get_current_user(
    session_id: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """User behind the session cookie, None for anonymous requests"""
    return await auth_service.get_user_by_session(session_id)


async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in"
        )
    return user


async def require_admin(user: User = Depends(require_user)) -> User:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user
