"""
Integration tests for the Retail Banking API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from retail_banking.api import create_app
from retail_banking.api.auth import BankingSystem
from retail_banking.config import BankConfig


PASSWORD = "Secret123!"


def user_payload(email="alice@example.com", phone="+447700900001", **overrides):
    payload = {
        "name": "Alice Smith",
        "email": email,
        "phoneNumber": phone,
        "password": PASSWORD,
        "address": {
            "line1": "1 High Street",
            "town": "London",
            "county": "Greater London",
            "postcode": "E1 6AN",
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def client():
    """Create a test client backed by in-memory storage"""
    config = BankConfig(
        database_url="memory://",
        jwt_secret="integration-test-secret-key-000000001",
    )
    system = BankingSystem(config)
    app = create_app(system)
    with TestClient(app) as test_client:
        yield test_client
    system.close()


def register(client, email="alice@example.com", phone="+447700900001"):
    """Register and log in, returning (user_id, auth headers)"""
    r = client.post("/v1/users", json=user_payload(email=email, phone=phone))
    assert r.status_code == 201
    user_id = r.json()["id"]

    r = client.post("/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200
    return user_id, {"Authorization": f"Bearer {r.json()['accessToken']}"}


def open_account(client, headers, name="Main"):
    r = client.post("/v1/accounts", json={"name": name, "accountType": "personal"}, headers=headers)
    assert r.status_code == 201
    return r.json()["accountNumber"]


class TestHealthEndpoints:
    """Test basic health endpoint"""

    def test_health(self, client):
        """Test health endpoint"""
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"


class TestUsersAndAuth:
    """Test registration, login and profile access"""

    def test_register_user(self, client):
        """Test registration returns the public profile"""
        r = client.post("/v1/users", json=user_payload())
        assert r.status_code == 201
        data = r.json()
        assert data["id"].startswith("usr-")
        assert data["email"] == "alice@example.com"
        assert data["phoneNumber"] == "+447700900001"
        assert data["address"]["town"] == "London"
        assert "password" not in data
        assert "passwordHash" not in data

    def test_duplicate_registration(self, client):
        """Test duplicate email is a 409"""
        client.post("/v1/users", json=user_payload())
        r = client.post("/v1/users", json=user_payload(phone="+447700900002"))
        assert r.status_code == 409
        assert r.json() == {"message": "A user with this email already exists"}

    def test_registration_validation(self, client):
        """Test weak passwords and unknown fields are rejected with details"""
        r = client.post("/v1/users", json=user_payload(password="weak"))
        assert r.status_code == 400
        body = r.json()
        assert body["message"] == "Validation failed"
        assert body["details"][0]["field"] == "password"

        r = client.post("/v1/users", json=user_payload(isAdmin=True))
        assert r.status_code == 400

        r = client.post("/v1/users", json=user_payload(phone="07700900001"))
        assert r.status_code == 400
        assert r.json()["details"][0]["field"] == "phoneNumber"

    def test_login_failure(self, client):
        """Test wrong credentials are a 401"""
        register(client)
        r = client.post("/v1/auth/login", json={"email": "alice@example.com", "password": "Wrong123!"})
        assert r.status_code == 401
        assert r.json() == {"message": "Invalid email or password"}

    def test_get_and_update_own_profile(self, client):
        """Test a user can read and update only their own profile"""
        user_id, headers = register(client)
        other_id, _ = register(client, email="bob@example.com", phone="+447700900002")

        r = client.get(f"/v1/users/{user_id}", headers=headers)
        assert r.status_code == 200
        assert r.json()["id"] == user_id

        r = client.patch(f"/v1/users/{user_id}", json={"name": "Alice Jones"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["name"] == "Alice Jones"

        r = client.get(f"/v1/users/{other_id}", headers=headers)
        assert r.status_code == 403

        r = client.get("/v1/users/not-a-user-id", headers=headers)
        assert r.status_code == 400

    def test_missing_and_invalid_tokens(self, client):
        """Test protected routes require a valid bearer token"""
        r = client.get("/v1/accounts")
        assert r.status_code == 401
        assert r.json() == {"message": "Access token is missing"}

        r = client.get("/v1/accounts", headers={"Authorization": "Bearer garbage"})
        assert r.status_code == 401
        assert r.json() == {"message": "Invalid access token"}


class TestAccounts:
    """Test account endpoints"""

    def test_create_and_get_account(self, client):
        """Test opening an account and reading it back"""
        _, headers = register(client)
        r = client.post("/v1/accounts", json={"name": "Main", "accountType": "personal"}, headers=headers)
        assert r.status_code == 201
        account = r.json()
        assert account["accountNumber"].startswith("01")
        assert account["sortCode"] == "10-10-10"
        assert account["balance"] == 0
        assert account["currency"] == "GBP"
        assert account["accountType"] == "personal"

        r = client.get(f"/v1/accounts/{account['accountNumber']}", headers=headers)
        assert r.status_code == 200
        assert r.json() == account

    def test_create_account_validation(self, client):
        """Test blank names and unknown account types are rejected"""
        _, headers = register(client)
        for payload in [
            {"name": "   ", "accountType": "personal"},
            {"name": "Main", "accountType": "business"},
            {"name": "x" * 101, "accountType": "personal"},
            {"name": "Main"},
        ]:
            r = client.post("/v1/accounts", json=payload, headers=headers)
            assert r.status_code == 400

    def test_list_accounts_newest_first(self, client):
        """Test listing returns the caller's accounts, newest first"""
        _, headers = register(client)
        first = open_account(client, headers, "First")
        second = open_account(client, headers, "Second")

        r = client.get("/v1/accounts", headers=headers)
        assert r.status_code == 200
        numbers = [account["accountNumber"] for account in r.json()["accounts"]]
        assert numbers == [second, first]

    def test_update_account(self, client):
        """Test renaming an account"""
        _, headers = register(client)
        number = open_account(client, headers)

        r = client.patch(f"/v1/accounts/{number}", json={"name": "Savings"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["name"] == "Savings"

    def test_not_found_before_forbidden(self, client):
        """Test missing accounts are 404 and other users' accounts are 403"""
        _, alice = register(client)
        _, bob = register(client, email="bob@example.com", phone="+447700900002")
        number = open_account(client, alice)
        missing = "01000000" if number != "01000000" else "01000001"

        r = client.get(f"/v1/accounts/{missing}", headers=bob)
        assert r.status_code == 404
        assert r.json() == {"message": "Bank account not found"}

        r = client.get(f"/v1/accounts/{number}", headers=bob)
        assert r.status_code == 403
        assert r.json() == {"message": "Not authorized to access this account"}

        r = client.get("/v1/accounts/12345", headers=bob)
        assert r.status_code == 400


class TestTransactions:
    """Test transaction endpoints"""

    def test_deposit_and_withdraw(self, client):
        """Test deposit 100 then withdraw 30 leaves 70"""
        user_id, headers = register(client)
        number = open_account(client, headers)
        url = f"/v1/accounts/{number}/transactions"

        r = client.post(url, json={"amount": 100, "currency": "GBP", "type": "deposit"}, headers=headers)
        assert r.status_code == 201
        deposit = r.json()
        assert deposit["id"].startswith("tan-")
        assert deposit["amount"] == 100
        assert deposit["userId"] == user_id
        assert "reference" not in deposit

        r = client.post(
            url,
            json={"amount": 30.5, "currency": "GBP", "type": "withdrawal", "reference": "Rent"},
            headers=headers
        )
        assert r.status_code == 201
        withdrawal = r.json()
        assert withdrawal["reference"] == "Rent"

        r = client.get(f"/v1/accounts/{number}", headers=headers)
        assert r.json()["balance"] == 69.5

        r = client.get(url, headers=headers)
        assert [t["id"] for t in r.json()["transactions"]][0] == withdrawal["id"]

        r = client.get(f"{url}/{deposit['id']}", headers=headers)
        assert r.status_code == 200
        assert r.json() == deposit

    def test_insufficient_funds(self, client):
        """Test overdrawing is a 422 and changes nothing"""
        _, headers = register(client)
        number = open_account(client, headers)
        url = f"/v1/accounts/{number}/transactions"
        client.post(url, json={"amount": 50, "currency": "GBP", "type": "deposit"}, headers=headers)

        r = client.post(url, json={"amount": 50.01, "currency": "GBP", "type": "withdrawal"}, headers=headers)
        assert r.status_code == 422
        assert r.json() == {
            "message": "Insufficient funds. Current balance: £50.00, Withdrawal amount: £50.01"
        }

        assert client.get(f"/v1/accounts/{number}", headers=headers).json()["balance"] == 50
        assert len(client.get(url, headers=headers).json()["transactions"]) == 1

    def test_amount_validation(self, client):
        """Test out-of-range, over-precise and non-numeric amounts are 400"""
        _, headers = register(client)
        number = open_account(client, headers)
        url = f"/v1/accounts/{number}/transactions"

        for amount in [0, -5, 10000.01, 10.001, "10.00", True, 1e30, 10 ** 30]:
            r = client.post(url, json={"amount": amount, "currency": "GBP", "type": "deposit"}, headers=headers)
            assert r.status_code == 400, amount

        r = client.post(url, json={"amount": 10000, "currency": "GBP", "type": "deposit"}, headers=headers)
        assert r.status_code == 201

    def test_other_field_validation(self, client):
        """Test currency, type and reference validation"""
        _, headers = register(client)
        number = open_account(client, headers)
        url = f"/v1/accounts/{number}/transactions"

        for payload in [
            {"amount": 1, "currency": "USD", "type": "deposit"},
            {"amount": 1, "currency": "GBP", "type": "transfer"},
            {"amount": 1, "currency": "GBP", "type": "deposit", "reference": "x" * 256},
            {"amount": 1, "currency": "GBP", "type": "deposit", "extra": 1},
        ]:
            r = client.post(url, json=payload, headers=headers)
            assert r.status_code == 400

        r = client.post(
            url, json={"amount": 1, "currency": "GBP", "type": "deposit", "reference": ""}, headers=headers
        )
        assert r.status_code == 201
        assert "reference" not in r.json()

    def test_transaction_access(self, client):
        """Test ownership and lookup errors on transaction routes"""
        _, alice = register(client)
        _, bob = register(client, email="bob@example.com", phone="+447700900002")
        number = open_account(client, alice)
        other = open_account(client, alice, "Second")
        url = f"/v1/accounts/{number}/transactions"
        r = client.post(url, json={"amount": 5, "currency": "GBP", "type": "deposit"}, headers=alice)
        transaction_id = r.json()["id"]

        r = client.post(url, json={"amount": 5, "currency": "GBP", "type": "deposit"}, headers=bob)
        assert r.status_code == 403

        r = client.get(f"/v1/accounts/{other}/transactions/{transaction_id}", headers=alice)
        assert r.status_code == 404
        assert r.json() == {"message": "Transaction not found"}

        r = client.get(f"{url}/bad-id", headers=alice)
        assert r.status_code == 400
