from typing import Optional, cast
from fastapi import Depends, HTTPException, status, Request
import jwt
from datetime import datetime, timedelta
import uuid
import pytz
import logging

from lunchbox.core.config import Settings

logger = logging.getLogger(__name__)

def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings

def _secret_key(settings: Settings) -> bytes:
    # PyJWT accepts bytes keys
    return settings.JWT_SECRET_KEY.encode()

def new_client_id() -> str:
    return f"client_{uuid.uuid4().hex}"

def _token_from_request(request: Request, settings: Settings) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return request.cookies.get(settings.SESSION_COOKIE_NAME)

async def get_current_client(
    request: Request,
    settings: Settings = Depends(get_app_settings)
) -> str:
    """
    Get the client id from the session token in the request.

    The token is read from the Authorization header, falling back to the
    session cookie so that browser redirects (OAuth callbacks) are
    recognised too.

    Args:
        request: FastAPI Request object
        settings: Application settings holding the signing key

    Returns:
        Client ID from token

    Raises:
        HTTPException: If token is missing, invalid or expired
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = _token_from_request(request, settings)
    if not token:
        logger.debug("No session token in request")
        raise credentials_exception

    try:
        payload = jwt.decode(token, _secret_key(settings), algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Session token has expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.PyJWTError as e:
        logger.debug(f"JWT Error: {str(e)}")
        raise credentials_exception

    client_id = cast(Optional[str], payload.get("sub"))
    if client_id is None:
        logger.debug("No client id found in token payload")
        raise credentials_exception
    return client_id

def create_access_token(client_id: str, settings: Settings) -> str:
    """
    Create a new JWT session token.

    Args:
        client_id: Client ID to encode in token
        settings: Application settings holding the signing key

    Returns:
        JWT access token
    """
    expire = datetime.now(pytz.UTC) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": client_id,
        "exp": expire
    }
    encoded_jwt = jwt.encode(to_encode, _secret_key(settings), algorithm=settings.JWT_ALGORITHM)
    # Handle different return types from jwt.encode
    if isinstance(encoded_jwt, (bytes, bytearray)):
        return encoded_jwt.decode('utf-8')
    return str(encoded_jwt)
