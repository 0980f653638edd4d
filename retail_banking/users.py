"""
User Management Module

Registration, profile updates and credential checks for bank customers.
Users are keyed by their customer-facing usr- id; email addresses and phone
numbers are unique across users.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Optional
import hashlib
import hmac
import secrets

from .errors import ConflictError, NotFoundError, UnauthorizedError
from .identifiers import generate_user_id
from .storage import StorageInterface


@dataclass
class Address:
    """Postal address"""
    line1: str
    town: str
    county: str
    postcode: str
    line2: Optional[str] = None
    line3: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Address":
        return cls(
            line1=data["line1"],
            line2=data.get("line2"),
            line3=data.get("line3"),
            town=data["town"],
            county=data["county"],
            postcode=data["postcode"],
        )


@dataclass
class User:
    """Bank customer"""
    user_id: str
    name: str
    email: str
    phone_number: str
    address: Address
    password_hash: str
    password_salt: str
    created_at: datetime
    updated_at: datetime


class UserManager:
    """Manages user lifecycle and authentication"""

    def __init__(
        self,
        storage: StorageInterface,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.storage = storage
        self.table = "users"
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def create_user(
        self,
        name: str,
        email: str,
        phone_number: str,
        password: str,
        address: Address
    ) -> User:
        """
        Register a new user

        Raises:
            ConflictError: If the email or phone number is already registered
        """
        email = email.lower()
        self._check_unique(email=email, phone_number=phone_number)

        now = self.clock()
        salt = self._generate_salt()
        user = User(
            user_id=generate_user_id(),
            name=name,
            email=email,
            phone_number=phone_number,
            address=address,
            password_hash=self._hash_password(password, salt),
            password_salt=salt,
            created_at=now,
            updated_at=now,
        )

        self.storage.insert(self.table, user.user_id, self._user_to_dict(user))
        return user

    def get_user(self, user_id: str) -> User:
        """Get user by customer-facing id"""
        data = self.storage.load(self.table, user_id)
        if not data:
            raise NotFoundError("User was not found")
        return self._user_from_dict(data)

    def get_user_by_email(self, email: str) -> Optional[User]:
        found = self.storage.find(self.table, {"email": email.lower()})
        if found:
            return self._user_from_dict(found[0])
        return None

    def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
        address: Optional[Address] = None
    ) -> User:
        """
        Update profile fields that were supplied and differ from stored values

        No write happens and updated_at is kept when nothing changes.

        Raises:
            NotFoundError: If the user does not exist
            ConflictError: If the new email or phone number belongs to another user
        """
        with self.storage.atomic():
            user = self.get_user(user_id)
            changed = False

            if name is not None and name != user.name:
                user.name = name
                changed = True

            if email is not None and email.lower() != user.email:
                self._check_unique(email=email.lower())
                user.email = email.lower()
                changed = True

            if phone_number is not None and phone_number != user.phone_number:
                self._check_unique(phone_number=phone_number)
                user.phone_number = phone_number
                changed = True

            if address is not None and address != user.address:
                user.address = address
                changed = True

            if not changed:
                return user

            user.updated_at = self.clock()
            self.storage.save(self.table, user.user_id, self._user_to_dict(user))

        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Verify credentials

        Raises:
            UnauthorizedError: If the email is unknown or the password is wrong
        """
        user = self.get_user_by_email(email)
        if not user or not self._verify_password(user, password):
            raise UnauthorizedError("Invalid email or password")
        return user

    def _check_unique(self, email: Optional[str] = None, phone_number: Optional[str] = None) -> None:
        if email is not None and self.storage.find(self.table, {"email": email}):
            raise ConflictError("A user with this email already exists")
        if phone_number is not None and self.storage.find(self.table, {"phone_number": phone_number}):
            raise ConflictError("A user with this phone number already exists")

    def _generate_salt(self) -> str:
        """Generate random salt for password hashing"""
        return secrets.token_hex(16)

    def _hash_password(self, password: str, salt: str) -> str:
        """Hash password with salt using scrypt"""
        return hashlib.scrypt(
            password.encode(),
            salt=salt.encode(),
            n=16384, r=8, p=1
        ).hex()

    def _verify_password(self, user: User, password: str) -> bool:
        expected = self._hash_password(password, user.password_salt)
        return hmac.compare_digest(expected, user.password_hash)

    def _user_to_dict(self, user: User) -> Dict:
        return {
            "user_id": user.user_id,
            "name": user.name,
            "email": user.email,
            "phone_number": user.phone_number,
            "address": user.address.to_dict(),
            "password_hash": user.password_hash,
            "password_salt": user.password_salt,
            "created_at": user.created_at.isoformat(),
            "updated_at": user.updated_at.isoformat(),
        }

    def _user_from_dict(self, data: Dict) -> User:
        return User(
            user_id=data["user_id"],
            name=data["name"],
            email=data["email"],
            phone_number=data["phone_number"],
            address=Address.from_dict(data["address"]),
            password_hash=data["password_hash"],
            password_salt=data["password_salt"],
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
