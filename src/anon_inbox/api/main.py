from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from anon_inbox.clients.database import init_db
from anon_inbox.errors import (
    Forbidden,
    InboxError,
    InvalidContent,
    InvalidPurpose,
    InvalidUsername,
    MessageNotFound,
    StoreUnavailable,
    Unauthorized,
    UserNotFound,
    UsernameTaken,
)
from anon_inbox.models.message import ActionResponse, MessageListResponse, MessageSubmitRequest
from anon_inbox.models.user import (
    AcceptanceStatus,
    AcceptanceUpdateRequest,
    AcceptanceUpdateResponse,
    Identity,
    PublicProfile,
    User,
    UserCreateRequest,
)
from anon_inbox.providers.base import IdentityProvider
from anon_inbox.providers.header import HeaderIdentityProvider
from anon_inbox.services.acceptance_service import AcceptanceService
from anon_inbox.services.inbox_service import InboxService
from anon_inbox.services.user_service import UserService
from anon_inbox.utils.logging import setup_logging
from anon_inbox.utils.pathing import ensure_runtime_directories

LOG = logging.getLogger(__name__)

ERROR_STATUS = {
    UserNotFound: status.HTTP_404_NOT_FOUND,
    MessageNotFound: status.HTTP_404_NOT_FOUND,
    InvalidContent: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidPurpose: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidUsername: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UsernameTaken: status.HTTP_409_CONFLICT,
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    ensure_runtime_directories()
    init_db()
    user_service = UserService()
    acceptance_service = AcceptanceService()
    inbox_service = InboxService(user_service, acceptance_service)

    app.state.user_service = user_service
    app.state.acceptance_service = acceptance_service
    app.state.inbox_service = inbox_service
    app.state.identity_provider = HeaderIdentityProvider(user_service)
    yield


app = FastAPI(title="Anon Inbox API", version="0.1.0", lifespan=lifespan)


def _require_service(name: str):
    service = getattr(app.state, name, None)
    if service is None:
        raise RuntimeError(f"Service '{name}' not initialised.")
    return service


def get_user_service() -> UserService:
    return _require_service("user_service")


def get_acceptance_service() -> AcceptanceService:
    return _require_service("acceptance_service")


def get_inbox_service() -> InboxService:
    return _require_service("inbox_service")


def get_identity_provider() -> IdentityProvider:
    return _require_service("identity_provider")


def get_current_identity(
    request: Request,
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    identity = identity_provider.current_user(request)
    if identity is None:
        raise Unauthorized("Not authenticated.")
    return identity


@app.exception_handler(InboxError)
async def inbox_error_handler(request: Request, exc: InboxError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        LOG.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": exc.message, "kind": exc.kind},
    )


VALIDATION_KINDS = {
    "content": InvalidContent.kind,
    "purpose": InvalidPurpose.kind,
    "username": InvalidUsername.kind,
}


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = str(first.get("loc", ("body",))[-1])
    message = f"Invalid {field}: {first.get('msg', 'malformed request')}"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "message": message, "kind": VALIDATION_KINDS.get(field, "invalid_request")},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Lightweight health probe."""
    return {"status": "ok"}


@app.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: UserCreateRequest,
    users: UserService = Depends(get_user_service),
) -> User:
    return users.register(payload.username)


@app.get("/users/check-username", response_model=ActionResponse)
def check_username(
    username: str,
    users: UserService = Depends(get_user_service),
) -> ActionResponse:
    if users.is_username_available(username):
        return ActionResponse(success=True, message="Username is unique")
    return ActionResponse(success=False, message="Username is already taken")


@app.get("/u/{username}", response_model=PublicProfile)
def public_profile(
    username: str,
    users: UserService = Depends(get_user_service),
) -> PublicProfile:
    user = users.get_by_username(username)
    if user is None:
        raise UserNotFound(f"User '{username}' not found.")
    return PublicProfile(username=user.username, isAcceptingMessage=user.accepting_messages)


@app.get("/accept-messages", response_model=AcceptanceStatus)
def get_accept_messages(
    identity: Identity = Depends(get_current_identity),
    acceptance: AcceptanceService = Depends(get_acceptance_service),
) -> AcceptanceStatus:
    return AcceptanceStatus(isAcceptingMessage=acceptance.get_acceptance(identity.id))


@app.post("/accept-messages", response_model=AcceptanceUpdateResponse)
def set_accept_messages(
    payload: AcceptanceUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    acceptance: AcceptanceService = Depends(get_acceptance_service),
) -> AcceptanceUpdateResponse:
    value = acceptance.set_acceptance(identity.id, payload.acceptMessages)
    return AcceptanceUpdateResponse(
        message="Message acceptance status updated successfully",
        isAcceptingMessage=value,
    )


@app.get("/get-messages", response_model=MessageListResponse)
def get_messages(
    identity: Identity = Depends(get_current_identity),
    inbox: InboxService = Depends(get_inbox_service),
) -> MessageListResponse:
    return MessageListResponse(messages=inbox.list_messages(identity.id, identity.id))


@app.post("/send-message", response_model=ActionResponse)
def send_message(
    payload: MessageSubmitRequest,
    inbox: InboxService = Depends(get_inbox_service),
) -> ActionResponse:
    result = inbox.submit(payload.targetUsername, payload.content, payload.purpose)
    if not result.accepted:
        return ActionResponse(success=False, message="User is not accepting messages")
    return ActionResponse(success=True, message="Message sent successfully")


@app.delete("/delete-message/{message_id}", response_model=ActionResponse)
def delete_message(
    message_id: str,
    identity: Identity = Depends(get_current_identity),
    inbox: InboxService = Depends(get_inbox_service),
) -> ActionResponse:
    inbox.delete_message(identity.id, message_id)
    return ActionResponse(success=True, message="Message deleted")
