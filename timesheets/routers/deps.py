from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from typing import Optional
from timesheets.context import AppContext
from timesheets.models.schemas import Identity

bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_current_user(
    token: Optional[str] = Depends(get_token),
    context: AppContext = Depends(get_context)
) -> Identity:
    # AuthenticationError is turned into a 401 by the app's exception handlers
    return context.identity.current_user(token)
