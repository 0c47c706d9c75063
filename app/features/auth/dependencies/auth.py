from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.features.auth.utils.security import decode_access_token
from app.platform.errors import Unauthorized

security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Dependency returning the authenticated user's id (the token's `sub`).

    Reports only ever need the owner id, so no user row is loaded.
    """
    if credentials is None:
        raise Unauthorized()

    try:
        payload = decode_access_token(credentials.credentials)
    except ValueError as e:
        raise Unauthorized(str(e)) from e

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid authentication credentials")
    return str(user_id)
