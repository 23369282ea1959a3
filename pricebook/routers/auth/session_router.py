from fastapi import APIRouter, Depends

from pricebook.schemas.auth.auth_schemas import LoginRequest, SignUpRequest, SessionOut, MeOut
from pricebook.services.auth.session_service import SessionProvider
from pricebook.services.data.data_service import DataService
from pricebook.services.workspace import guard_session
from pricebook.utils.get_user import get_current_user, get_data_service, get_session_provider, CurrentUser
from pricebook.utils.response import APIResponse, ERROR_RESPONSES, success_response
from pricebook.utils.logger import get_logger

logger = get_logger("auth.router")

router = APIRouter(prefix="/auth", tags=["Auth"], responses=ERROR_RESPONSES)


@router.post("/login", response_model=APIResponse[SessionOut])
async def login(
    payload: LoginRequest,
    data: DataService = Depends(get_data_service),
    sessions: SessionProvider = Depends(get_session_provider),
):
    logger.info("Login attempt", extra={"email": payload.email})

    session = await sessions.sign_in(payload.email, payload.password)
    await guard_session(data, sessions, session)

    return success_response("Login successful", SessionOut(**session.model_dump()))


@router.post("/signup")
async def signup(
    payload: SignUpRequest,
    sessions: SessionProvider = Depends(get_session_provider),
):
    logger.info("Sign-up attempt", extra={"email": payload.email})

    profile = await sessions.sign_up(payload.email, payload.password, payload.full_name)

    return success_response("Account created", profile)


@router.post("/logout")
async def logout(
    current_user: CurrentUser = Depends(get_current_user),
    sessions: SessionProvider = Depends(get_session_provider),
):
    logger.info("Logout request", extra={"user_id": current_user.id})

    await sessions.sign_out()

    return success_response("Logged out successfully")


@router.get("/me", response_model=APIResponse[MeOut])
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    data: DataService = Depends(get_data_service),
):
    profiles = await data.select("profiles", {"id": current_user.id})
    full_name = profiles[0]["full_name"] if profiles else ""

    return success_response(
        "Session fetched",
        MeOut(
            user_id=current_user.id,
            email=current_user.session.email,
            full_name=full_name,
            permissions=current_user.permissions,
        ),
    )
