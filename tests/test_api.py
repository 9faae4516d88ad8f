import httpx
import pytest
from sqlalchemy.exc import OperationalError

from cofre.core.database import get_db
from cofre.features.market_rates.cache import TTLCache
from cofre.features.market_rates.router import get_market_rates_service
from cofre.features.market_rates.service import MarketRatesService
from cofre.main import app

pytestmark = pytest.mark.anyio

API = "/api/v1"


async def _post(client, path, payload):
    response = await client.post(f"{API}{path}", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _seed_june(client):
    await _post(client, "/ledger/fixed", {"kind": "INCOME", "amount": 3000, "startDate": "2024-01-01"})
    await _post(client, "/ledger/fixed", {
        "kind": "EXPENSE", "amount": 1000, "startDate": "2024-01-01", "categoryId": "housing", "dueDay": 10,
    })
    await _post(client, "/ledger/entries", {
        "kind": "EXPENSE", "amount": 500, "date": "2024-06-10", "categoryId": "food",
    })


async def test_root_status(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "Operational"


async def test_account_header_is_required(client):
    response = await client.get(f"{API}/analytics/monthly-summary", headers={"X-Account-Id": ""})
    assert response.status_code == 422


async def test_blank_account_header_is_rejected(client):
    response = await client.get(f"{API}/analytics/monthly-summary", headers={"X-Account-Id": "   "})
    assert response.status_code == 422


async def test_monthly_summary(client):
    await _seed_june(client)

    response = await client.get(f"{API}/analytics/monthly-summary", params={"month": 6, "year": 2024})
    assert response.status_code == 200
    body = response.json()
    assert body["income"] == {"fixed": 3000.0, "extra": 0.0, "total": 3000.0}
    assert body["expenses"]["fixed"]["total"] == 1000.0
    assert body["expenses"]["variable"]["total"] == 500.0
    assert body["expenses"]["piggyBanks"]["total"] == 0.0
    assert body["balance"] == 1500.0
    assert body["health"] == {"percentage": 50.0, "status": "excellent"}


async def test_accounts_are_isolated(client):
    await _seed_june(client)
    response = await client.get(
        f"{API}/analytics/financial-health",
        params={"month": 6, "year": 2024},
        headers={"X-Account-Id": "someone-else"},
    )
    assert response.json()["income"] == 0


async def test_score_with_no_data(client):
    response = await client.get(f"{API}/analytics/financial-score", params={"month": 6, "year": 2024})
    assert response.status_code == 200
    body = response.json()
    assert body["score"] == 200
    assert body["maxScore"] == 1000
    assert body["level"] == "Critical"
    assert [p["name"] for p in body["pillars"]] == ["Savings", "Budget", "Reserve", "Diversification", "Habits"]


async def test_emergency_goal_enables_reserve_pillar(client):
    await _seed_june(client)
    await _post(client, "/assets", {
        "name": "Savings account", "category": "POUPANCA", "status": "QUITADO", "estimatedValue": 3000,
    })
    await _post(client, "/goals", {"name": "Reserve", "type": "EMERGENCY_FUND"})

    response = await client.get(f"{API}/analytics/financial-score", params={"month": 6, "year": 2024})
    reserve = next(p for p in response.json()["pillars"] if p["name"] == "Reserve")
    # 3000 of (0 average + 1000 fixed) * 6
    assert reserve["score"] == 100


async def test_month_comparison(client):
    for payload in [
        {"kind": "EXPENSE", "amount": 100, "date": "2024-05-03", "categoryId": "Food"},
        {"kind": "EXPENSE", "amount": 150, "date": "2024-06-03", "categoryId": "Food"},
        {"kind": "EXPENSE", "amount": 80, "date": "2024-06-04", "categoryId": "Pets"},
    ]:
        await _post(client, "/ledger/entries", payload)

    response = await client.get(
        f"{API}/analytics/reports/month-comparison",
        params={"month1": 5, "year1": 2024, "month2": 6, "year2": 2024},
    )
    assert response.status_code == 200
    changes = {c["categoryId"]: c for c in response.json()["changes"]}
    assert changes["Food"]["change"] == 50.0
    assert changes["Food"]["changePercent"] == 50.0
    assert changes["Pets"]["change"] == 80.0
    assert changes["Pets"]["changePercent"] == 100.0
    assert response.json()["biggestIncrease"]["categoryId"] == "Pets"


async def test_monthly_evolution_rejects_reversed_range(client):
    response = await client.get(
        f"{API}/analytics/reports/monthly-evolution",
        params={"start_month": 6, "start_year": 2024, "end_month": 1, "end_year": 2024},
    )
    assert response.status_code == 400


async def test_monthly_evolution_needs_month_and_year_together(client):
    response = await client.get(f"{API}/analytics/reports/monthly-evolution", params={"start_month": 1})
    assert response.status_code == 400

    response = await client.get(
        f"{API}/analytics/reports/monthly-evolution",
        params={"start_month": 1, "start_year": 2024, "end_year": 2024},
    )
    assert response.status_code == 400


async def test_monthly_evolution_range(client):
    await _seed_june(client)
    response = await client.get(
        f"{API}/analytics/reports/monthly-evolution",
        params={"start_month": 11, "start_year": 2023, "end_month": 2, "end_year": 2024},
    )
    items = response.json()
    assert [(i["month"], i["year"]) for i in items] == [(11, 2023), (12, 2023), (1, 2024), (2, 2024)]
    assert items[0]["expenses"] == 0
    assert items[2]["expenses"] == 1000.0


async def test_projection_is_bounded(client):
    response = await client.get(f"{API}/analytics/reports/cash-flow-projection", params={"months": 999})
    assert response.status_code == 422

    response = await client.get(f"{API}/analytics/reports/cash-flow-projection", params={"months": 3})
    assert len(response.json()["projections"]) == 3


async def test_wallet_skip_month_round_trip(client):
    wallet = await _post(client, "/wallets", {
        "name": "Trip", "targetAmount": 1200, "periodsTotal": 12, "monthlyContribution": 100,
    })
    path = f"{API}/wallets/{wallet['id']}/skip-month"

    for _ in range(2):
        response = await client.post(path, json={"month": 3, "year": 2030})
        assert response.status_code == 200
        assert response.json()["skipped"] is True

    [listed] = (await client.get(f"{API}/wallets")).json()
    assert listed["skippedMonths"] == [{"month": 3, "year": 2030}]

    response = await client.delete(path, params={"month": 3, "year": 2030})
    assert response.json()["skipped"] is False
    [listed] = (await client.get(f"{API}/wallets")).json()
    assert listed["skippedMonths"] == []


async def test_skip_unknown_wallet_is_404(client):
    response = await client.post(
        f"{API}/wallets/00000000-0000-0000-0000-000000000000/skip-month",
        json={"month": 1, "year": 2030},
    )
    assert response.status_code == 404


async def test_wallet_withdrawal_floors_at_zero(client):
    wallet = await _post(client, "/wallets", {"name": "Trip", "targetAmount": 1000})
    path = f"{API}/wallets/{wallet['id']}/transactions"

    await _post(client, f"/wallets/{wallet['id']}/transactions", {"type": "DEPOSIT", "amount": 200})
    result = await _post(client, f"/wallets/{wallet['id']}/transactions", {"type": "WITHDRAWAL", "amount": 500})
    assert result["wallet"]["currentAmount"] == 0

    history = (await client.get(path)).json()
    assert len(history) == 2


async def test_wallet_rejects_two_bounds(client):
    response = await client.post(f"{API}/wallets", json={
        "name": "Trip", "targetAmount": 1000, "endDate": "2030-01-01", "periodsTotal": 4,
    })
    assert response.status_code == 400


async def test_wallet_update_recomputes_schedule(client):
    wallet = await _post(client, "/wallets", {
        "name": "Trip", "targetAmount": 1200, "periodsTotal": 12, "monthlyContribution": 100,
    })
    path = f"{API}/wallets/{wallet['id']}"
    assert wallet["suggestedMonthlyAmount"] == 100.0

    response = await client.patch(path, json={"name": "Vacation", "periodsTotal": 6})
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Vacation"
    assert body["monthsRemaining"] == 6
    assert body["suggestedMonthlyAmount"] == 200.0
    assert body["monthlyContribution"] == 100.0

    body = (await client.patch(path, json={"endDate": "2099-01-01"})).json()
    assert body["endDate"] == "2099-01-01"
    assert body["periodsTotal"] is None

    response = await client.patch(path, json={"endDate": "2099-01-01", "periodsTotal": 3})
    assert response.status_code == 400

    response = await client.patch(f"{API}/wallets/00000000-0000-0000-0000-000000000000", json={"name": "X"})
    assert response.status_code == 404


async def test_deleting_wallet_transactions_reverses_balance(client):
    wallet = await _post(client, "/wallets", {"name": "Trip", "targetAmount": 1000})
    txn_path = f"/wallets/{wallet['id']}/transactions"

    deposit = (await _post(client, txn_path, {"type": "DEPOSIT", "amount": 300}))["transaction"]
    withdrawal = (await _post(client, txn_path, {"type": "WITHDRAWAL", "amount": 100}))["transaction"]

    response = await client.delete(f"{API}{txn_path}/{withdrawal['id']}")
    assert response.status_code == 200
    assert response.json()["currentAmount"] == 300.0

    await _post(client, txn_path, {"type": "WITHDRAWAL", "amount": 250})
    response = await client.delete(f"{API}{txn_path}/{deposit['id']}")
    assert response.json()["currentAmount"] == 0

    history = (await client.get(f"{API}{txn_path}")).json()
    assert [t["type"] for t in history] == ["WITHDRAWAL"]

    response = await client.delete(f"{API}{txn_path}/{deposit['id']}")
    assert response.status_code == 404


async def test_fixed_entry_edit(client):
    await _seed_june(client)
    [expense] = (await client.get(f"{API}/ledger/fixed", params={"kind": "EXPENSE"})).json()
    path = f"{API}/ledger/fixed/{expense['id']}"

    response = await client.patch(path, json={"amount": 1200, "dueDay": 5})
    assert response.status_code == 200
    assert response.json()["amount"] == 1200.0
    assert response.json()["dueDay"] == 5
    assert response.json()["categoryId"] == "housing"

    summary = (await client.get(f"{API}/analytics/monthly-summary", params={"month": 6, "year": 2024})).json()
    assert summary["expenses"]["fixed"]["total"] == 1200.0

    response = await client.patch(path, json={"endDate": "2023-12-31"})
    assert response.status_code == 400

    body = (await client.patch(path, json={"endDate": "2024-03-31"})).json()
    assert body["endDate"] == "2024-03-31"
    summary = (await client.get(f"{API}/analytics/monthly-summary", params={"month": 6, "year": 2024})).json()
    assert summary["expenses"]["fixed"]["total"] == 0


async def test_variable_expense_edit_moves_month(client):
    entry = await _post(client, "/ledger/entries", {
        "kind": "EXPENSE", "amount": 50, "date": "2024-06-10", "categoryId": "food",
    })

    response = await client.patch(f"{API}/ledger/entries/{entry['id']}", json={"date": "2024-07-02", "amount": 80})
    assert response.status_code == 200
    body = response.json()
    assert (body["date"], body["month"], body["year"]) == ("2024-07-02", 7, 2024)
    assert body["amount"] == 80.0

    june = (await client.get(f"{API}/ledger/entries", params={"month": 6, "year": 2024})).json()
    july = (await client.get(f"{API}/ledger/entries", params={"month": 7, "year": 2024})).json()
    assert june == []
    assert [e["id"] for e in july] == [entry["id"]]


async def test_extra_income_edit_keeps_month_year(client):
    entry = await _post(client, "/ledger/entries", {"kind": "INCOME", "amount": 400, "month": 6, "year": 2024})

    body = (await client.patch(f"{API}/ledger/entries/{entry['id']}", json={"month": 8, "date": "2024-06-01"})).json()
    assert (body["date"], body["month"], body["year"]) == (None, 8, 2024)

    response = await client.patch(
        f"{API}/ledger/entries/00000000-0000-0000-0000-000000000000", json={"amount": 10}
    )
    assert response.status_code == 404


async def test_reminders_and_mark_paid(client):
    await _seed_june(client)
    [expense] = (await client.get(f"{API}/ledger/fixed", params={"kind": "EXPENSE"})).json()

    reminders = (await client.get(f"{API}/ledger/fixed/reminders", params={"month": 1, "year": 2024})).json()
    assert reminders["summary"]["pending"] == 1

    for _ in range(2):
        response = await client.post(f"{API}/ledger/fixed/{expense['id']}/pay", json={"month": 1, "year": 2024})
        assert response.status_code == 204

    reminders = (await client.get(f"{API}/ledger/fixed/reminders", params={"month": 1, "year": 2024})).json()
    assert reminders["reminders"][0]["status"] == "paid"
    assert reminders["summary"] == {"total": 1, "paid": 1, "pending": 0, "overdue": 0, "dueSoon": 0}


async def test_budget_status_endpoint(client):
    await _seed_june(client)
    response = await client.put(f"{API}/budgets", json={
        "categoryId": "food", "month": 6, "year": 2024, "amount": 400,
    })
    assert response.status_code == 200

    body = (await client.get(f"{API}/budgets/status", params={"month": 6, "year": 2024})).json()
    [food] = body["budgets"]
    assert food["actual"] == 500.0
    assert food["percentage"] == 125.0
    assert food["status"] == "danger"


async def test_market_rates_endpoint(client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"data": "01/06/2024", "valor": "10.50"}])

    app.dependency_overrides[get_market_rates_service] = lambda: MarketRatesService(
        TTLCache(60), transport=httpx.MockTransport(handler)
    )
    response = await client.get(f"{API}/market-rates")
    assert response.status_code == 200
    assert response.json()["selic"] == {"value": "10.50", "date": "01/06/2024"}


class UnavailableSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", None, Exception("connection refused"))


async def test_storage_failure_maps_to_503(client):
    async def broken_db():
        yield UnavailableSession()

    app.dependency_overrides[get_db] = broken_db
    response = await client.get(f"{API}/analytics/monthly-summary", params={"month": 6, "year": 2024})
    assert response.status_code == 503
    assert response.json() == {"detail": "Data unavailable"}
