"""
User Profile Routes

GET /users/current-user - Get own profile
PATCH /users/update-account - Update fullname and email
PATCH /users/profile-image - Upload profile image
PATCH /users/cover-image - Upload cover image
POST /users/qualifications - Add a qualification
GET /users/applied-jobs - Get my applied jobs
POST /users/applied-jobs - Apply to a job
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from portal.api.deps import get_profile_service
from portal.core.auth import get_current_user
from portal.services.profile_service import ProfileService
from portal.utils.file_upload import save_upload_to_temp
from portal.schemas.schemas import (
    AccountUpdate, ApplyRequest, JobSummary, QualificationAdd, UserPublic, envelope
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/current-user")
def get_current(user: dict = Depends(get_current_user)):
    return envelope(200, UserPublic.model_validate(user), "Current user fetched successfully")


@router.patch("/update-account")
def update_account(
    data: AccountUpdate,
    user: dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Update display name and email. Both are required."""
    updated = profiles.update_account(user["_id"], data.fullname, data.email)
    return envelope(200, UserPublic.model_validate(updated), "Account details updated successfully")


@router.patch("/profile-image")
async def update_profile_image(
    profile_image: Optional[UploadFile] = File(None, alias="profileImage"),
    user: dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    local_path = await save_upload_to_temp(profile_image)
    updated = await run_in_threadpool(profiles.update_profile_image, user["_id"], local_path)
    return envelope(200, UserPublic.model_validate(updated), "Profile image updated successfully")


@router.patch("/cover-image")
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    user: dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    local_path = await save_upload_to_temp(cover_image)
    updated = await run_in_threadpool(profiles.update_cover_image, user["_id"], local_path)
    return envelope(200, UserPublic.model_validate(updated), "Cover image updated successfully")


@router.post("/qualifications")
def add_qualification(
    data: QualificationAdd,
    user: dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Append a qualification ({degree, startYear, endYear}) to the profile."""
    updated = profiles.add_qualification(user["_id"], data.qualification.model_dump())
    return envelope(200, UserPublic.model_validate(updated), "Qualification added successfully")


@router.get("/applied-jobs")
def get_applied_jobs(
    user: dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Applied jobs in application order, without description/impression."""
    jobs = profiles.list_applied_jobs(user["_id"])
    return envelope(200, [JobSummary.model_validate(j) for j in jobs], "Applied jobs fetched successfully")


@router.post("/applied-jobs")
def apply_to_job(
    data: ApplyRequest,
    user: dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Apply to a job. Cannot apply twice to the same job."""
    profiles.apply_to_job(user["_id"], data.job_id)
    return envelope(200, {}, "Job added to applied list successfully")
