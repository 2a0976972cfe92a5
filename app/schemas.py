from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from app.errors import ErrorCode
from app.models import NotificationType


# --- Users ---

class AuthorSummary(BaseModel):
    id: int
    name: str | None = None
    image: str | None = None
    username: str
    model_config = ConfigDict(from_attributes=True)


class UserBase(BaseModel):
    username: str = Field(max_length=50)
    email: str = Field(max_length=255)
    name: str | None = None
    image: str | None = None
    bio: str | None = None


class UserCreate(UserBase):
    pass


class UserResponse(UserBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ProfileCounts(BaseModel):
    followers: int = 0
    following: int = 0
    posts: int = 0


class ProfileResponse(UserResponse):
    counts: ProfileCounts


# --- Comments ---

class CommentCreate(BaseModel):
    content: str = ""


class CommentResponse(BaseModel):
    id: int
    content: str
    author_id: int
    post_id: int
    created_at: datetime
    author: AuthorSummary | None = None
    model_config = ConfigDict(from_attributes=True)


# --- Posts ---

class PostCreate(BaseModel):
    content: str = ""
    image: str | None = None


class PostSummary(BaseModel):
    id: int
    content: str | None
    image: str | None
    created_at: datetime
    author_id: int
    model_config = ConfigDict(from_attributes=True)


class LikeResponse(BaseModel):
    user_id: int
    model_config = ConfigDict(from_attributes=True)


class PostDetail(PostSummary):
    author: AuthorSummary
    comments: list[CommentResponse] = []
    likes: list[LikeResponse] = []
    like_count: int = 0


# --- Notifications ---

class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    read: bool
    created_at: datetime
    post_id: int | None = None
    comment_id: int | None = None
    creator: AuthorSummary
    model_config = ConfigDict(from_attributes=True)


class MarkReadRequest(BaseModel):
    notification_ids: list[int]


# --- Result envelopes ---

class ActionResult(BaseModel):
    success: bool
    error: str | None = None
    code: ErrorCode | None = None


class PostResult(ActionResult):
    post: PostSummary | None = None


class CommentResult(ActionResult):
    comment: CommentResponse | None = None


class LikeResult(ActionResult):
    liked: bool | None = None


class FeedResult(ActionResult):
    posts: list[PostDetail] = []


class ProfilePage(BaseModel):
    user: ProfileResponse
    posts: list[PostDetail]
    liked_posts: list[PostDetail]
    is_following: bool


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_posts: int
    total_comments: int
    total_likes: int
    total_users: int
    total_notifications: int
    cache_info: dict = {}
