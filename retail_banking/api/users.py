"""
User registration and profile endpoints
"""

from fastapi import APIRouter, Depends, status

from .auth import BankingSystem, get_banking_system, get_current_user
from .schemas import CreateUserRequest, UpdateUserRequest, check_user_id, user_to_response
from ..auth import TokenClaims
from ..errors import ForbiddenError
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger("retail_banking.api.users")


def _own_user_id(user_id: str, claims: TokenClaims) -> str:
    check_user_id(user_id)
    if user_id != claims.user_id:
        raise ForbiddenError("Not authorized to access this user")
    return user_id


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    request: CreateUserRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Register a new user"""
    user = system.user_manager.create_user(
        name=request.name,
        email=request.email,
        phone_number=request.phone_number,
        password=request.password,
        address=request.address.to_address()
    )
    log_action(logger, "info", "User registered",
               user_id=user.user_id, action="create_user", resource="user")
    return user_to_response(user)


@router.get("/{user_id}")
def get_user(
    user_id: str,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Get the authenticated user's profile"""
    _own_user_id(user_id, claims)
    return user_to_response(system.user_manager.get_user(user_id))


@router.patch("/{user_id}")
def update_user(
    user_id: str,
    request: UpdateUserRequest,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Update the authenticated user's profile"""
    _own_user_id(user_id, claims)
    user = system.user_manager.update_user(
        user_id,
        name=request.name,
        email=request.email,
        phone_number=request.phone_number,
        address=request.address.to_address() if request.address else None
    )
    log_action(logger, "info", "User updated",
               user_id=user_id, action="update_user", resource="user")
    return user_to_response(user)
