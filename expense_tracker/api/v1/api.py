from fastapi import APIRouter

from expense_tracker.core.auth import fastapi_users, auth_backend
from expense_tracker.schemas.user import UserRead, UserCreate
from expense_tracker.api.v1.routes import auth, users, categories, transactions, dashboard

api_router = APIRouter()

# Authentication: custom logout first, then the fastapi-users routers
api_router.include_router(auth.router, prefix="/auth")
api_router.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["Authentication"],
)
api_router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["Authentication"],
)

# Business logic routes
api_router.include_router(users.router)
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(dashboard.router)
