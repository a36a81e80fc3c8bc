from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.guards import AdminContext
from src.api.utils.admin_auth import authenticated, login_throttle, session_only
from src.api.utils.dispatch import envelope, error_envelope, respond
from src.api.utils.request_meta import client_ip, user_agent
from src.app.services.security_heuristics import SecurityHeuristics
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import LoadContextUseCase, LoginUseCase, LogoutUseCase
from src.depends import get_security_heuristics, get_unit_of_work

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    """
    Login HTTP request payload
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")
    remember_me: bool = Field(False, description="Issue a long-lived token")


@router.post(
    "/login", status_code=status.HTTP_200_OK, dependencies=[Depends(login_throttle)]
)
async def login(
    request: LoginRequest,
    http_request: Request,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    heuristics: SecurityHeuristics = Depends(get_security_heuristics),
):
    """
    User Login

    Issues a token (httpOnly cookie + body) and opens a session. Both outcomes
    are fed to the security heuristics after the response is sent.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: ACCOUNT_LOCKED
        - 422 Unprocessable Entity: Invalid input
        - 429 Too Many Requests: RATE_LIMIT_EXCEEDED, per client address
    """
    ip_address = client_ip(http_request) or "unknown"
    agent = user_agent(http_request)

    use_case = LoginUseCase(uow)
    result = await use_case.execute(
        request.email,
        request.password,
        remember_me=request.remember_me,
        ip_address=ip_address,
        user_agent=agent,
    )

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            # Returned rather than raised so the background task still runs
            background_tasks.add_task(heuristics.on_login_failure, ip_address, agent)
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED, content=error_envelope(error)
            )
        if error.code == "ACCOUNT_LOCKED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    data = result.value
    background_tasks.add_task(heuristics.on_login_success, UUID(data.user.id), ip_address, agent)

    ttl_days = (
        ApplicationConfig.REMEMBER_ME_TTL_DAYS
        if request.remember_me
        else ApplicationConfig.TOKEN_TTL_DAYS
    )
    response = JSONResponse(content=envelope(data.model_dump(), "Login successful"))
    response.set_cookie(
        ApplicationConfig.AUTH_COOKIE_NAME,
        data.token,
        max_age=ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=ApplicationConfig.AUTH_COOKIE_SECURE,
        samesite="strict",
    )
    return response


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    response: Response,
    admin: AdminContext = Depends(session_only),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Revoke the current session and clear the cookie"""
    result = await LogoutUseCase(uow).execute(admin.user_id, admin.session_id)
    response.delete_cookie(ApplicationConfig.AUTH_COOKIE_NAME)
    return respond(result, message="Logout successful")


@router.get("/me", status_code=status.HTTP_200_OK)
async def me(
    admin: AdminContext = Depends(authenticated),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current user context: id, email, roles with permissions and the derived
    legacy `role`.
    """
    result = await LoadContextUseCase(uow).execute(admin.user_id)
    return respond(result, {"USER_NOT_FOUND": status.HTTP_404_NOT_FOUND})
