"""
Account endpoints: sign-up, sign-in, sign-out and the current user.
"""

from fastapi import APIRouter, status

from bookbridge.core.models.io.accounts import LoginRequest, SessionRead, SignUpRequest
from bookbridge.core.models.io.profiles import ProfileRead
from bookbridge.server.services.deps import AuthServiceDep, ProfileServiceDep, TokenDep, UserDep

router = APIRouter()


@router.post(
    "/signup",
    response_model=SessionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create an account, provision its profile and return a bearer token.",
    responses={409: {"description": "Email already registered"}},
)
async def sign_up(payload: SignUpRequest, auth: AuthServiceDep) -> SessionRead:
    issued, profile = await auth.sign_up(payload.email, payload.password, payload.full_name)
    return SessionRead(
        access_token=issued.token,
        expires_at=issued.record.expires_at,
        user_id=issued.record.account_id,
        profile=ProfileRead.model_validate(profile),
    )


@router.post(
    "/login",
    response_model=SessionRead,
    summary="Sign In",
    description="Exchange email and password for a new bearer token.",
    responses={401: {"description": "Invalid credentials"}},
)
async def login(payload: LoginRequest, auth: AuthServiceDep) -> SessionRead:
    issued = await auth.sign_in(payload.email, payload.password)
    return SessionRead(
        access_token=issued.token,
        expires_at=issued.record.expires_at,
        user_id=issued.record.account_id,
    )


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign Out",
    description="Revoke the bearer token used for this request.",
)
async def logout(caller: UserDep, token: TokenDep, auth: AuthServiceDep) -> None:
    await auth.sign_out(token)


@router.get(
    "/me",
    response_model=ProfileRead,
    summary="Current User",
    description="Return the signed-in caller's profile.",
)
async def me(caller: UserDep, profiles: ProfileServiceDep) -> ProfileRead:
    return ProfileRead.model_validate(await profiles.me())
