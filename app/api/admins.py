"""Current admin profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.api.deps import get_admin_repository, http_error
from app.domain import NotFoundError, Outcome
from app.models.admins import AdminProfileUpdate, AdminUser
from app.repositories import AdminRepository

router = APIRouter(prefix="/api/v1/admins", tags=["admins"])


def _unwrap(outcome: Outcome):
    if not outcome.ok:
        raise http_error(outcome.error)
    return outcome.value


async def _current(admins: AdminRepository) -> AdminUser:
    admin = _unwrap(await admins.get_current_admin())
    if admin is None:
        principal = admins.principals.current_principal()
        raise http_error(NotFoundError("Admin profile", principal.uid if principal else ""))
    return admin


@router.get("/me", response_model=AdminUser, summary="Get the signed-in admin")
async def get_me(admins: AdminRepository = Depends(get_admin_repository)) -> AdminUser:
    return await _current(admins)


@router.post(
    "/me",
    response_model=AdminUser,
    status_code=status.HTTP_201_CREATED,
    summary="Create the signed-in admin's profile",
)
async def create_me(
    profile: AdminProfileUpdate,
    admins: AdminRepository = Depends(get_admin_repository),
) -> AdminUser:
    _unwrap(await admins.create_admin_profile(AdminUser(**profile.model_dump())))
    return await _current(admins)


@router.put("/me", response_model=AdminUser, summary="Update the signed-in admin's profile")
async def update_me(
    profile: AdminProfileUpdate,
    admins: AdminRepository = Depends(get_admin_repository),
) -> AdminUser:
    current = await _current(admins)
    updated = current.model_copy(update=profile.model_dump())
    _unwrap(await admins.update_admin_profile(updated))
    return await _current(admins)
