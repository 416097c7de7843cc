import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from appointment_api.auth import jwt_handler
from appointment_api.auth.user_manager import UserManager
from appointment_api.database import get_db
from appointment_api.models.user import User

security = HTTPBearer()


def get_user_manager(db: Session = Depends(get_db)) -> UserManager:
    return UserManager(db)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    user_manager: UserManager = Depends(get_user_manager),
) -> User | None:
    """Resolve the bearer token to a user.

    A valid token whose user has since been deleted or renamed yields
    ``None``; each route decides how to report that.
    """
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    return user_manager.find_by_email(email)
