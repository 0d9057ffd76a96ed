"""Account and session endpoints"""
from fastapi import APIRouter, Depends, Request, status

from filevault.api.deps import (
    get_credential_service,
    get_current_principal,
    get_device_id,
    get_token_manager,
)
from filevault.errors import InvalidCredentials
from filevault.middleware.monitoring import record_auth_failure, record_token_issued
from filevault.middleware.rate_limit import AUTH_RATE_LIMIT, limiter
from filevault.schemas.auth import (
    AccessTokenData,
    RefreshRequest,
    SigninRequest,
    SignupRequest,
    TokenPairData,
    UserInfo,
)
from filevault.schemas.common import ApiResponse
from filevault.services.credentials import CredentialService
from filevault.services.tokens import Principal, TokenManager
from filevault.utils.logger import logger

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=ApiResponse[TokenPairData], status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
def signup(
    request: Request,
    payload: SignupRequest,
    device_id: str = Depends(get_device_id),
    credentials: CredentialService = Depends(get_credential_service),
    tokens: TokenManager = Depends(get_token_manager),
):
    """
    Register a new identity and sign it in on the calling device

    The refresh token is only returned here and on signin.
    """
    credentials.register(payload.id, payload.password)
    pair = tokens.issue(payload.id, device_id)
    record_token_issued("signup")

    return ApiResponse(
        message="User registered successfully",
        data=TokenPairData(token=pair.access_token, refresh_token=pair.refresh_token),
    )


@router.post("/signin", response_model=ApiResponse[TokenPairData])
@limiter.limit(AUTH_RATE_LIMIT)
def signin(
    request: Request,
    payload: SigninRequest,
    device_id: str = Depends(get_device_id),
    credentials: CredentialService = Depends(get_credential_service),
    tokens: TokenManager = Depends(get_token_manager),
):
    """Exchange id + password for a new token pair bound to this device"""
    if not credentials.verify_credentials(payload.id, payload.password):
        record_auth_failure("InvalidCredentials")
        logger.warning("Failed signin attempt", extra={"device_id": device_id, "action": "signin"})
        raise InvalidCredentials()

    pair = tokens.issue(payload.id, device_id)
    record_token_issued("signin")

    return ApiResponse(
        message="Signed in successfully",
        data=TokenPairData(token=pair.access_token, refresh_token=pair.refresh_token),
    )


@router.post("/signin/new_token", response_model=ApiResponse[AccessTokenData])
@limiter.limit(AUTH_RATE_LIMIT)
def refresh_access_token(
    request: Request,
    payload: RefreshRequest,
    tokens: TokenManager = Depends(get_token_manager),
):
    """Trade a live refresh token for a fresh access token"""
    access_token = tokens.rotate(payload.refresh_token)
    return ApiResponse(message="Token refreshed", data=AccessTokenData(token=access_token))


@router.get("/info", response_model=ApiResponse[UserInfo])
def info(principal: Principal = Depends(get_current_principal)):
    """Identity behind the presented access token"""
    return ApiResponse(data=UserInfo(id=principal.user_id))


@router.get("/logout", response_model=ApiResponse[None])
def logout(
    principal: Principal = Depends(get_current_principal),
    tokens: TokenManager = Depends(get_token_manager),
):
    """Revoke this device's tokens; sessions on other devices stay valid"""
    tokens.revoke_device(principal.user_id, principal.device_id)
    return ApiResponse(message="Logged out successfully")
