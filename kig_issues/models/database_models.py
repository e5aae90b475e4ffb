from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from .user import UserRole


class IssueCategory(str, Enum):
    POWER = "power"
    SEWER = "sewer"
    ROADS = "roads"
    WATER = "water"
    LIGHTS = "lights"
    DRAINAGE = "drainage"
    PARKS = "parks"
    WATERWAYS = "waterways"
    WILDLIFE = "wildlife"
    SECURITY = "security"
    WASTE = "waste"
    OTHER = "other"


class IssueStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "inProgress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class IssuePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityType(str, Enum):
    ISSUE_CREATED = "issueCreated"
    ISSUE_UPDATED = "issueUpdated"
    ISSUE_RESOLVED = "issueResolved"
    USER_JOINED = "userJoined"
    DONATION_RECEIVED = "donationReceived"
    MESSAGE_POSTED = "messagePosted"
    GROUP_CREATED = "groupCreated"


def _dedupe(values: list) -> list:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


# User Model
class User(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole = UserRole.RESIDENT
    phone: Optional[str] = None
    work_group: Optional[str] = None
    profile_picture: Optional[str] = None
    password_hash: Optional[str] = Field(default=None, exclude=True, repr=False)
    created_at: datetime
    updated_at: datetime


class Location(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None


# Issue Model
class Issue(BaseModel):
    id: str
    title: str
    description: str
    category: IssueCategory
    status: IssueStatus = IssueStatus.OPEN
    priority: IssuePriority = IssuePriority.MEDIUM
    location: Location
    photos: List[str] = Field(default_factory=list)
    reported_by: str
    assigned_to: Optional[str] = None
    work_group: Optional[str] = None
    resolved_at: Optional[datetime] = None
    estimated_cost: Optional[float] = None
    donation_goal: Optional[float] = None
    donations_received: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class IssueCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: IssueCategory
    priority: IssuePriority = IssuePriority.MEDIUM
    location: Location
    photos: List[str] = Field(default_factory=list, max_length=5)
    estimated_cost: Optional[float] = Field(None, ge=0)
    donation_goal: Optional[float] = Field(None, ge=0)


class IssueUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[IssueCategory] = None
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    location: Optional[Location] = None
    assigned_to: Optional[str] = None
    work_group: Optional[str] = None
    estimated_cost: Optional[float] = Field(None, ge=0)
    donation_goal: Optional[float] = Field(None, ge=0)
    donations_received: Optional[float] = Field(None, ge=0)

    # Only assignment and money fields can be cleared with null
    @field_validator("title", "description", "category", "status", "priority", "location")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class MapPin(BaseModel):
    id: str
    latitude: float
    longitude: float
    status: IssueStatus
    category: IssueCategory
    title: str
    priority: IssuePriority


class ContactInfo(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None


# Work Group Model
class WorkGroup(BaseModel):
    id: str
    name: str
    description: str = ""
    leader_id: str
    members: List[str] = Field(default_factory=list)
    area: str = ""
    specialization: List[IssueCategory] = Field(default_factory=list)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    category: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    @field_validator("members", "specialization")
    @classmethod
    def unique_values(cls, v):
        return _dedupe(v)


class WorkGroupCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    leader_id: str
    members: List[str] = Field(default_factory=list)
    area: str = ""
    specialization: List[IssueCategory] = Field(default_factory=list)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    category: Optional[str] = None
    is_active: bool = True


# Task Model
class Task(BaseModel):
    id: str
    title: str
    description: str = ""
    work_group_id: str
    assigned_to: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[str] = None
    issue_id: Optional[str] = None
    created_by: str
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    assigned_to: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[str] = None
    issue_id: Optional[str] = None


# Activity Log Model (append-only)
class ActivityLog(BaseModel):
    id: str
    type: ActivityType
    description: str
    user_id: str
    related_id: Optional[str] = None
    before_data: Optional[Dict[str, Any]] = None
    after_data: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = {"frozen": True}
