"""
Session Service - registration, login, renewal, logout, password change.

Each identity holds at most one refresh token:

    NoSession --login--> Active(C1) --renew(C1)--> Active(C2)
    Active(Cn) --logout--> NoSession

Renewing with anything but the stored token fails, which is how reuse of a
superseded token is detected.
"""

import logging
from typing import Optional, Tuple

from portal.core.errors import BadRequestError, ConflictError, InternalError, NotFoundError, UnauthorizedError
from portal.core.security import TokenCodec, TokenError, hash_password, verify_password
from portal.services.mongo_service import UserStore

logger = logging.getLogger(__name__)


def sanitize(user: dict) -> dict:
    """Drop the password hash and refresh token from a user document."""
    return {k: v for k, v in user.items() if k not in ("password", "refresh_token")}


class SessionService:

    def __init__(self, users: UserStore, access_codec: TokenCodec, refresh_codec: TokenCodec, image_host=None):
        self.users = users
        self.access_codec = access_codec
        self.refresh_codec = refresh_codec
        self.image_host = image_host

    # ------------------------------------------------------------
    # Token issue
    # ------------------------------------------------------------

    def _mint_pair(self, user: dict) -> Tuple[str, str]:
        try:
            access_token = self.access_codec.sign(
                user["_id"],
                {"email": user.get("email"), "username": user.get("username"), "fullname": user.get("fullname")},
            )
            refresh_token = self.refresh_codec.sign(user["_id"])
        except Exception as e:
            logger.error("Token generation failed for user %s: %s", user.get("_id"), e)
            raise InternalError("Something went wrong while generating tokens")
        return access_token, refresh_token

    # ------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------

    def register(self, fields: dict, cover_image_path: Optional[str] = None) -> dict:
        """
        Create an identity and return it sanitized.

        `fields` holds fullname, email, username, password (plaintext),
        mobile_number and birth_date. The optional cover image is uploaded
        only once the handle and address are known to be free.
        """
        username = fields["username"].lower()
        if self.users.find_by_login(username=username, email=fields["email"]):
            raise ConflictError("User with email or username already exists")

        cover_image_url = ""
        if cover_image_path and self.image_host is not None:
            uploaded = self.image_host.upload(cover_image_path)
            cover_image_url = (uploaded or {}).get("url", "")

        user_id = self.users.create({
            "fullname": fields["fullname"],
            "email": fields["email"],
            "username": username,
            "password": hash_password(fields["password"]),
            "mobile_number": fields["mobile_number"],
            "birth_date": fields["birth_date"],
            "profile_image": "",
            "cover_image": cover_image_url,
        })

        created = self.users.find_by_id(user_id)
        if not created:
            raise InternalError("Something went wrong while registering user")
        logger.info("Registered user %s", user_id)
        return created

    def login(self, password: str, username: str = None, email: str = None) -> dict:
        """
        Authenticate and start a session.

        Returns {"user", "access_token", "refresh_token"}; any previous
        refresh token of this identity stops working.
        """
        if not username and not email:
            raise BadRequestError("username or email is required")

        user = self.users.find_by_login(username=username, email=email)
        if not user:
            raise NotFoundError("User does not exist")

        if not verify_password(password, user.get("password")):
            logger.warning("Failed login for user %s", user["_id"])
            raise UnauthorizedError("Invalid user credentials")

        access_token, refresh_token = self._mint_pair(user)
        self.users.set_refresh_token(user["_id"], refresh_token)
        logger.info("User %s logged in", user["_id"])

        return {"user": sanitize(user), "access_token": access_token, "refresh_token": refresh_token}

    def renew(self, presented: Optional[str]) -> dict:
        """
        Exchange the current refresh token for a new pair.

        Returns {"access_token", "refresh_token"}.
        """
        if not presented:
            raise UnauthorizedError("Unauthorized request")

        try:
            payload = self.refresh_codec.verify(presented)
        except TokenError:
            raise UnauthorizedError("Invalid refresh token")

        user = self.users.find_by_id(payload["sub"], include_secrets=True)
        if not user:
            raise UnauthorizedError("Invalid refresh token")

        if user.get("refresh_token") != presented:
            logger.warning("Refresh token reuse detected for user %s", user["_id"])
            raise UnauthorizedError("Refresh token is expired or used")

        access_token, refresh_token = self._mint_pair(user)
        # Conditional swap: a concurrent renewal with the same token loses
        if not self.users.replace_refresh_token(user["_id"], presented, refresh_token):
            logger.warning("Refresh token for user %s changed during renewal", user["_id"])
            raise UnauthorizedError("Refresh token is expired or used")

        logger.info("Session renewed for user %s", user["_id"])
        return {"access_token": access_token, "refresh_token": refresh_token}

    def logout(self, user_id: str) -> None:
        """Clear the refresh token. Logging out twice is fine."""
        self.users.clear_refresh_token(user_id)
        logger.info("User %s logged out", user_id)

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        user = self.users.find_by_id(user_id, include_secrets=True)
        if not user:
            raise NotFoundError("User not found")

        if not verify_password(old_password, user.get("password")):
            raise BadRequestError("Invalid old password")

        self.users.set_password_hash(user_id, hash_password(new_password))
        logger.info("Password changed for user %s", user_id)
