"""
Login endpoint
"""

from fastapi import APIRouter, Depends

from .auth import BankingSystem, get_banking_system
from .schemas import LoginRequest
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger("retail_banking.api.login")


@router.post("/login")
def login(
    request: LoginRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Exchange credentials for a bearer token"""
    user = system.user_manager.authenticate(request.email, request.password)
    log_action(logger, "info", "User logged in",
               user_id=user.user_id, action="login", resource="user")
    return {"accessToken": system.token_service.issue(user)}
