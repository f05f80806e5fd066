import uuid
from decimal import Decimal

from fastapi.testclient import TestClient


def _post_transaction(client: TestClient, account_id: str, **body):
    return client.post(
        f"/accounts/{account_id}/transactions",
        json=body,
        headers={"Idempotency-Key": str(uuid.uuid4())},
    )


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_create_account_deposit_withdraw(client: TestClient) -> None:
    response = client.post("/accounts", json={"owner_name": "Alice"})
    assert response.status_code == 201
    account = response.json()
    account_id = account["id"]
    assert Decimal(account["balance"]) == 0

    deposit = _post_transaction(client, account_id, amount="100.00", category="Deposit")
    assert deposit.status_code == 201
    assert deposit.json()["category"] == "Deposit"

    withdraw = _post_transaction(client, account_id, amount="40", category="Withdrawal")
    assert withdraw.status_code == 201

    snapshot = client.get(f"/accounts/{account_id}")
    assert Decimal(snapshot.json()["balance"]) == Decimal("60")


def test_unknown_account_returns_404(client: TestClient) -> None:
    response = client.get(f"/accounts/{uuid.uuid4()}")
    assert response.status_code == 404


def test_duplicate_email_returns_400(client: TestClient) -> None:
    body = {"owner_name": "Bob", "email": "bob@example.com"}
    assert client.post("/accounts", json=body).status_code == 201

    response = client.post("/accounts", json=body)
    assert response.status_code == 400


def test_withdrawal_insufficient_funds(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Bob"}).json()["id"]

    response = _post_transaction(client, account_id, amount="1", category="Withdrawal")
    assert response.status_code == 409


def test_service_charge_cannot_overdraw(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Carol"}).json()["id"]
    _post_transaction(client, account_id, amount="5", category="Deposit")

    response = _post_transaction(client, account_id, amount="5.01", category="ServiceCharge")
    assert response.status_code == 409


def test_invalid_transaction_payloads_are_rejected(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Dave"}).json()["id"]

    assert _post_transaction(client, account_id, amount="-1", category="Deposit").status_code == 422
    assert _post_transaction(client, account_id, amount="1.005", category="Deposit").status_code == 422
    assert _post_transaction(client, account_id, amount="1", category="Gift").status_code == 422

    missing_key = client.post(
        f"/accounts/{account_id}/transactions",
        json={"amount": "1", "category": "Deposit"},
    )
    assert missing_key.status_code == 422


def test_transaction_idempotency(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Eve"}).json()["id"]
    key = str(uuid.uuid4())
    body = {"amount": "500", "category": "Deposit", "description": "Birthday"}

    first = client.post(
        f"/accounts/{account_id}/transactions", json=body, headers={"Idempotency-Key": key}
    )
    second = client.post(
        f"/accounts/{account_id}/transactions", json=body, headers={"Idempotency-Key": key}
    )
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json() == second.json()

    snapshot = client.get(f"/accounts/{account_id}")
    assert Decimal(snapshot.json()["balance"]) == Decimal("500")

    reused = client.post(
        f"/accounts/{account_id}/transactions",
        json={**body, "amount": "600"},
        headers={"Idempotency-Key": key},
    )
    assert reused.status_code == 409


def test_history_pagination_with_running_balance(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Frank"}).json()["id"]

    for day, amount in ((1, "100"), (2, "200"), (3, "300")):
        _post_transaction(
            client,
            account_id,
            amount=amount,
            category="Deposit",
            timestamp=f"2024-01-0{day}T09:00:00Z",
        )

    first_page = client.get(f"/accounts/{account_id}/transactions", params={"limit": 2})
    assert first_page.status_code == 200
    items = first_page.json()["items"]
    assert len(items) == 2
    # newest first
    assert [Decimal(entry["amount"]) for entry in items] == [Decimal("300"), Decimal("200")]
    assert [Decimal(entry["balance_after"]) for entry in items] == [
        Decimal("600"),
        Decimal("300"),
    ]

    cursor = first_page.json()["next_cursor"]
    second_page = client.get(
        f"/accounts/{account_id}/transactions", params={"cursor": cursor}
    )
    remain = second_page.json()["items"]
    assert len(remain) == 1
    assert Decimal(remain[0]["amount"]) == Decimal("100")
    assert Decimal(remain[0]["balance_after"]) == Decimal("100")
    assert second_page.json()["next_cursor"] is None


def test_history_invalid_cursor_returns_400(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Helen"}).json()["id"]
    _post_transaction(client, account_id, amount="100", category="Deposit")

    response = client.get(
        f"/accounts/{account_id}/transactions",
        params={"cursor": "not-a-valid-cursor"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid cursor"


def test_summary_endpoint(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Ivy"}).json()["id"]
    for amount, category in (
        ("100", "Deposit"),
        ("50", "Deposit"),
        ("20", "Withdrawal"),
        ("5", "ServiceCharge"),
        ("2.50", "Interest"),
    ):
        _post_transaction(client, account_id, amount=amount, category=category)

    response = client.get(f"/accounts/{account_id}/summary")
    assert response.status_code == 200
    summary = response.json()["summary"]

    assert Decimal(summary["deposits"]) == Decimal("150")
    assert Decimal(summary["withdrawals"]) == Decimal("20")
    assert Decimal(summary["service_charges"]) == Decimal("5")
    assert Decimal(summary["interests"]) == Decimal("2.50")
    assert Decimal(summary["balance"]) == Decimal("127.50")
    assert summary["transaction_count"] == 5
    assert summary["skipped_count"] == 0

    metrics = response.json()["metrics"]
    assert metrics["is_positive_balance"] is True
    assert metrics["has_recent_activity"] is True


def test_monthly_statement(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Jack"}).json()["id"]
    _post_transaction(
        client, account_id, amount="100", category="Deposit", timestamp="2024-01-20T10:00:00Z"
    )
    _post_transaction(
        client, account_id, amount="30", category="Withdrawal", timestamp="2024-02-03T10:00:00Z"
    )
    _post_transaction(
        client, account_id, amount="1.05", category="Interest", timestamp="2024-02-29T23:00:00Z"
    )
    _post_transaction(
        client, account_id, amount="10", category="Deposit", timestamp="2024-03-01T00:00:00Z"
    )

    response = client.get(f"/accounts/{account_id}/statements/2024/2")
    assert response.status_code == 200
    statement = response.json()

    assert statement["period_start"] == "2024-02-01"
    assert statement["period_end"] == "2024-02-29"
    assert Decimal(statement["opening_balance"]) == Decimal("100")
    assert Decimal(statement["closing_balance"]) == Decimal("71.05")
    assert Decimal(statement["summary"]["withdrawals"]) == Decimal("30")
    assert Decimal(statement["summary"]["interests"]) == Decimal("1.05")
    assert [Decimal(line["balance_after"]) for line in statement["lines"]] == [
        Decimal("70"),
        Decimal("71.05"),
    ]

    assert client.get(f"/accounts/{account_id}/statements/2024/13").status_code == 400


def test_interest_job_endpoint(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Kim"}).json()["id"]
    _post_transaction(
        client, account_id, amount="1000", category="Deposit", timestamp="2024-04-02T10:00:00Z"
    )

    body = {"rate_percent": "1.5", "as_of": "2024-05-01T06:00:00Z"}
    response = client.post("/jobs/interest", json=body)
    assert response.status_code == 200
    result = response.json()
    assert result["paid"] == 1
    assert Decimal(result["total_interest_paid"]) == Decimal("15.00")

    again = client.post("/jobs/interest", json=body).json()
    assert again["paid"] == 0
    assert again["skipped"] == 1

    balance = client.get(f"/accounts/{account_id}").json()["balance"]
    assert Decimal(balance) == Decimal("1015.00")


def test_interest_job_requires_positive_rate(client: TestClient) -> None:
    response = client.post("/jobs/interest", json={"rate_percent": "0"})
    assert response.status_code == 400


def test_statement_job_endpoint(client: TestClient) -> None:
    first = client.post("/accounts", json={"owner_name": "Lee"}).json()["id"]
    client.post("/accounts", json={"owner_name": "Max"})
    _post_transaction(
        client, first, amount="25", category="Deposit", timestamp="2024-06-10T10:00:00Z"
    )

    everyone = client.post("/jobs/statements", json={"year": 2024, "month": 6})
    assert everyone.status_code == 200
    assert everyone.json()["generated"] == 2

    single = client.post(
        "/jobs/statements", json={"year": 2024, "month": 6, "account_id": first}
    )
    statements = single.json()["statements"]
    assert len(statements) == 1
    assert Decimal(statements[0]["closing_balance"]) == Decimal("25")

    missing = client.post(
        "/jobs/statements",
        json={"year": 2024, "month": 6, "account_id": str(uuid.uuid4())},
    )
    assert missing.status_code == 404


def test_statement_year_out_of_range_returns_400(client: TestClient) -> None:
    account_id = client.post("/accounts", json={"owner_name": "Nia"}).json()["id"]

    response = client.get(f"/accounts/{account_id}/statements/99999999999999999999/1")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid statement period"
