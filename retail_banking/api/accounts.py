"""
Account management endpoints
"""

from fastapi import APIRouter, Depends, status

from .auth import BankingSystem, get_banking_system, get_current_user
from .schemas import (
    CreateAccountRequest, UpdateAccountRequest,
    account_to_response, check_account_number
)
from ..auth import TokenClaims
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger("retail_banking.api.accounts")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_account(
    request: CreateAccountRequest,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a new account"""
    account = system.ledger.create_account(
        user_id=claims.user_id,
        name=request.name,
        account_type=request.account_type
    )
    log_action(logger, "info", "Account created",
               user_id=claims.user_id, action="create_account",
               resource=f"account:{account.account_number}")
    return account_to_response(account)


@router.get("")
def list_accounts(
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """List the caller's accounts, newest first"""
    accounts = system.ledger.list_accounts_for_user(claims.user_id)
    return {"accounts": [account_to_response(account) for account in accounts]}


@router.get("/{account_number}")
def get_account(
    account_number: str,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Get account details"""
    check_account_number(account_number)
    return account_to_response(system.ledger.get_account(account_number, claims.user_id))


@router.patch("/{account_number}")
def update_account(
    account_number: str,
    request: UpdateAccountRequest,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Update account name or type"""
    check_account_number(account_number)
    account = system.ledger.update_account_metadata(
        account_number,
        claims.user_id,
        name=request.name,
        account_type=request.account_type
    )
    log_action(logger, "info", "Account updated",
               user_id=claims.user_id, action="update_account",
               resource=f"account:{account_number}")
    return account_to_response(account)
