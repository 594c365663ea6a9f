from fastapi import APIRouter, Depends
from typing import Optional
from timesheets.context import AppContext
from timesheets.models.schemas import Identity, LoginInput, RegisterInput, TokenResponse
from timesheets.routers.deps import get_context, get_current_user, get_token
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterInput, context: AppContext = Depends(get_context)):
    user = context.identity.register(body.email, body.password, body.display_name)
    token = context.identity.sign_in(body.email, body.password)
    return TokenResponse(token=token, user=user)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginInput, context: AppContext = Depends(get_context)):
    token = context.identity.sign_in(body.email, body.password)
    return TokenResponse(token=token, user=context.identity.current_user(token))


@router.post("/logout")
async def logout(
    token: Optional[str] = Depends(get_token),
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    context.timers.get(user.id).stop()
    context.identity.sign_out(token)
    return {"status": "signed_out"}


@router.get("/me", response_model=Identity)
async def me(user: Identity = Depends(get_current_user)):
    return user
