"""
Transaction endpoints
"""

from fastapi import APIRouter, Depends, status

from .auth import BankingSystem, get_banking_system, get_current_user
from .schemas import (
    CreateTransactionRequest, check_account_number,
    check_transaction_id, transaction_to_response
)
from ..auth import TokenClaims
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger("retail_banking.api.transactions")


@router.post("/{account_number}/transactions", status_code=status.HTTP_201_CREATED)
def create_transaction(
    account_number: str,
    request: CreateTransactionRequest,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Deposit into or withdraw from an account"""
    check_account_number(account_number)
    transaction = system.ledger.apply_transaction(
        account_number,
        claims.user_id,
        request.to_money(),
        request.type,
        reference=request.reference
    )
    log_action(
        logger, "info", f"{transaction.transaction_type.value.capitalize()} applied",
        user_id=claims.user_id, action="create_transaction",
        resource=f"account:{account_number}",
        extra={
            "transaction_id": transaction.transaction_id,
            "amount": transaction.amount.to_storage(),
        }
    )
    return transaction_to_response(transaction)


@router.get("/{account_number}/transactions")
def list_transactions(
    account_number: str,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """List an account's transactions, newest first"""
    check_account_number(account_number)
    transactions = system.ledger.list_transactions_for_account(account_number, claims.user_id)
    return {"transactions": [transaction_to_response(t) for t in transactions]}


@router.get("/{account_number}/transactions/{transaction_id}")
def get_transaction(
    account_number: str,
    transaction_id: str,
    claims: TokenClaims = Depends(get_current_user),
    system: BankingSystem = Depends(get_banking_system)
):
    """Get a single transaction"""
    check_account_number(account_number)
    check_transaction_id(transaction_id)
    transaction = system.ledger.get_transaction(account_number, transaction_id, claims.user_id)
    return transaction_to_response(transaction)
