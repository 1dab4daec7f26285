"""
Profile Service - account fields, images, qualifications, applied jobs.

Every operation is scoped to the user id attached by the request gate.
"""

import logging
from typing import List, Optional

from portal.core.errors import BadRequestError, NotFoundError
from portal.services.mongo_service import JobStore, UserStore, to_object_id

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, users: UserStore, jobs: JobStore, image_host=None):
        self.users = users
        self.jobs = jobs
        self.image_host = image_host

    def update_account(self, user_id: str, fullname: str, email: str) -> dict:
        """Set display name and contact address; both are required."""
        if not fullname or not fullname.strip() or not email or not email.strip():
            raise BadRequestError("All fields are required")

        user = self.users.update_fields(user_id, {"fullname": fullname.strip(), "email": email.strip()})
        if not user:
            raise NotFoundError("User not found")
        return user

    def _update_image(self, user_id: str, field: str, local_path: Optional[str], label: str) -> dict:
        if not local_path:
            raise BadRequestError(f"{label} file is missing")

        uploaded = self.image_host.upload(local_path)
        if not uploaded or not uploaded.get("url"):
            raise BadRequestError(f"Error while uploading {label.lower()}")

        user = self.users.update_fields(user_id, {field: uploaded["url"]})
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile_image(self, user_id: str, local_path: Optional[str]) -> dict:
        return self._update_image(user_id, "profile_image", local_path, "Profile image")

    def update_cover_image(self, user_id: str, local_path: Optional[str]) -> dict:
        return self._update_image(user_id, "cover_image", local_path, "Cover image")

    def add_qualification(self, user_id: str, qualification: Optional[dict]) -> dict:
        """
        Append {degree, start_year, end_year} to the user's qualifications.

        All three keys must be present; the list is left untouched otherwise.
        """
        required = ("degree", "start_year", "end_year")
        if not qualification or any(qualification.get(k) in (None, "") for k in required):
            raise BadRequestError("All fields are required for qualification")

        entry = {k: qualification[k] for k in required}
        user = self.users.push_qualification(user_id, entry)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_applied_jobs(self, user_id: str) -> List[dict]:
        job_ids = self.users.get_applied_job_ids(user_id)
        if job_ids is None:
            raise NotFoundError("User not found")
        return self.jobs.get_summaries(job_ids)

    def apply_to_job(self, user_id: str, job_id: Optional[str]) -> None:
        if not job_id:
            raise BadRequestError("Job ID is required")
        if to_object_id(job_id) is None:
            raise BadRequestError("Invalid job ID")
        if not self.jobs.exists(job_id):
            raise NotFoundError("Job not found")

        if self.users.add_applied_job(user_id, job_id):
            logger.info("User %s applied to job %s", user_id, job_id)
            return

        # Nothing appended: either the user is gone or this is a repeat
        if self.users.get_applied_job_ids(user_id) is None:
            raise NotFoundError("User not found")
        raise BadRequestError("Job already applied")
