"""
FastAPI dependencies that build the stores and services.

Tests swap any of these out through `app.dependency_overrides`.
"""

from fastapi import Depends

from portal.core.security import TokenCodec, get_access_codec, get_refresh_codec
from portal.services.image_host import get_image_host
from portal.services.mongo_service import JobStore, UserStore
from portal.services.profile_service import ProfileService
from portal.services.session_service import SessionService


def get_user_store() -> UserStore:
    return UserStore()


def get_job_store() -> JobStore:
    return JobStore()


def get_session_service(
    users: UserStore = Depends(get_user_store),
    access_codec: TokenCodec = Depends(get_access_codec),
    refresh_codec: TokenCodec = Depends(get_refresh_codec),
    image_host=Depends(get_image_host),
) -> SessionService:
    return SessionService(users, access_codec, refresh_codec, image_host=image_host)


def get_profile_service(
    users: UserStore = Depends(get_user_store),
    jobs: JobStore = Depends(get_job_store),
    image_host=Depends(get_image_host),
) -> ProfileService:
    return ProfileService(users, jobs, image_host=image_host)
