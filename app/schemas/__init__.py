from app.schemas.common import CamelModel, Pagination, MessageResponse
from app.schemas.user import (
    UserCreate,
    UserSummary,
    UserResponse,
    Token,
    TokenRefresh,
    LoginRequest,
)
