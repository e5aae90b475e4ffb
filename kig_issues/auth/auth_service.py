from typing import Any, Dict, Optional
import logging

from ..models.database_models import ActivityType, Issue, User
from ..models.user import ROLE_RANK, UserRole
from ..services.activity_log_service import ActivityLogRecorder
from ..services.data_access import DataAccessService
from .security import create_access_token, decode_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def has_permission(user_role: UserRole, required_role: UserRole) -> bool:
    """True when `user_role` ranks at or above `required_role`."""
    return ROLE_RANK[UserRole(user_role)] >= ROLE_RANK[UserRole(required_role)]


def can_manage_issue(user: User, issue: Issue) -> bool:
    if user.role == UserRole.ADMIN:
        return True
    if user.role == UserRole.WORK_GROUP_LEADER and issue.assigned_to == user.id:
        return True
    return issue.reported_by == user.id


class AuthService:
    def __init__(self, data_access: DataAccessService, recorder: Optional[ActivityLogRecorder] = None):
        self.data_access = data_access
        self.recorder = recorder or ActivityLogRecorder(data_access)

    def generate_token(self, user: User) -> str:
        role = UserRole(user.role).value
        return create_access_token({
            "sub": user.id,
            "userId": user.id,
            "email": user.email,
            "role": role,
        })

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        claims = decode_access_token(token)
        if not claims or not claims.get("userId") or claims.get("role") not in {r.value for r in UserRole}:
            return None
        return claims

    async def login(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        logger.info(f"Login attempt: email={email}")
        user = await self.data_access.get_user_by_email(email)
        if user is None:
            logger.info(f"Login failed - unknown email: {email}")
            return None
        if not verify_password(password, user.password_hash):
            logger.info(f"Login failed - password mismatch: {email}")
            return None

        logger.info(f"Login successful: email={email}, user_id={user.id}")
        return {"user": user, "token": self.generate_token(user)}

    async def register(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a resident and sign them in. Any client-supplied role is ignored.

        Raises DuplicateEmailError when the email is already registered.
        """
        data = dict(user_data)
        password = data.pop("password")
        data["role"] = UserRole.RESIDENT
        data["password_hash"] = hash_password(password)

        user = await self.data_access.create_user(data)
        logger.info(f"Registration successful: email={user.email}, user_id={user.id}, role={user.role.value}")

        await self.recorder.record(
            ActivityType.USER_JOINED,
            f"{user.name} joined the community",
            user_id=user.id,
        )
        return {"user": user, "token": self.generate_token(user)}

    async def get_user_from_token(self, token: str) -> Optional[User]:
        claims = self.verify_token(token)
        if not claims:
            return None
        return await self.data_access.get_user_by_id(claims["userId"])
