"""
Core dependencies for route protection
"""

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.engine import Engine
from groupchat.config.settings import Settings
from groupchat.database.engine import get_engine
from groupchat.modules.auth.service import AuthService
from groupchat.modules.users.models import User
from groupchat.modules.users.repository import UserRepository
from typing import Optional

# auto_error is off so a missing token reaches AuthService and gets its own reason
security = HTTPBearer(auto_error=False)
api_token_header = APIKeyHeader(name="X-API-Token", auto_error=False)


def get_auth_service(engine: Engine = Depends(get_engine)) -> AuthService:
    return AuthService(UserRepository(engine))


def get_request_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    api_token: Optional[str] = Security(api_token_header)
) -> Optional[str]:
    """Token from `Authorization: Bearer`, falling back to the X-API-Token header"""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return api_token


def get_current_user(
    token: Optional[str] = Depends(get_request_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """Resolve the caller for a protected route"""
    return auth_service.authenticate(token)


def get_settings(request: Request) -> Settings:
    """Settings the running application was built with"""
    return request.app.state.settings
