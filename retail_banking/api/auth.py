"""
Authentication and authorization dependencies
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..auth import TokenClaims, TokenService
from ..config import BankConfig, get_config
from ..currency import Money
from ..errors import UnauthorizedError
from ..identifiers import LoggingAttemptRecorder
from ..ledger import AccountLedger
from ..logging_config import get_logger
from ..storage import StorageInterface, create_storage
from ..users import UserManager


security = HTTPBearer(auto_error=False)


class BankingSystem:
    """Retail banking system with all components initialized"""

    def __init__(self, config: Optional[BankConfig] = None, storage: Optional[StorageInterface] = None):
        self.config = config or get_config()

        # Initialize storage
        self.storage = storage or create_storage(self.config.database_url)

        # Initialize core components
        self.ledger = AccountLedger(
            self.storage,
            attempt_recorder=LoggingAttemptRecorder(get_logger("retail_banking.ledger")),
            max_transaction_amount=Money.parse(self.config.max_transaction_amount),
            max_account_number_attempts=self.config.account_number_max_attempts
        )
        self.user_manager = UserManager(self.storage)
        self.token_service = TokenService(
            self.config.jwt_secret,
            algorithm=self.config.jwt_algorithm,
            expiry_minutes=self.config.jwt_expiry_minutes
        )

    def close(self) -> None:
        self.storage.close()


# Dependency to get banking system
def get_banking_system(request: Request) -> BankingSystem:
    return request.app.state.banking_system


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    system: BankingSystem = Depends(get_banking_system)
) -> TokenClaims:
    """Dependency that validates the bearer token and returns its claims"""
    if not credentials:
        raise UnauthorizedError("Access token is missing")
    return system.token_service.verify(credentials.credentials)
