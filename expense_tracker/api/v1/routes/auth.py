# expense_tracker/api/v1/routes/auth.py
from fastapi import APIRouter, Response, status

from expense_tracker.schemas.common import Message

router = APIRouter(tags=["Authentication"])

# Registered ahead of the fastapi-users auth router so this path wins
@router.post("/jwt/logout", status_code=status.HTTP_200_OK, response_model=Message)
async def logout(response: Response):
    """
    Logout endpoint that doesn't require authentication.
    JWTs are stateless, so this only clears the access token cookie if present.
    """
    response.delete_cookie(key="access_token")
    return {"message": "Successfully logged out"}
