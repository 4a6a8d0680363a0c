"""Mock Monobank API for local runs and end-to-end tests"""

import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException

DEFAULT_TOKEN = "mock-token"
PAGE_SIZE = 500
MAX_RANGE_SECONDS = 2_682_000  # 31 days + 1 hour


def sample_accounts() -> List[Dict[str, Any]]:
    return [
        {"id": "black-uah", "sendId": "s1", "currencyCode": 980, "balance": 150000, "creditLimit": 0,
         "maskedPan": ["537541******1234"], "type": "black", "iban": "UA213223130000026007233566001"},
        {"id": "fop-usd", "sendId": "s2", "currencyCode": 840, "balance": 500000, "creditLimit": 0,
         "maskedPan": [], "type": "fop", "iban": "UA213223130000026007233566002"},
        {"id": "fop-uah", "sendId": "s3", "currencyCode": 980, "balance": 10000, "creditLimit": 0,
         "maskedPan": [], "type": "fop", "iban": "UA213223130000026007233566003"},
    ]


def sample_rates() -> List[Dict[str, Any]]:
    return [
        {"currencyCodeA": 840, "currencyCodeB": 980, "date": 1700000000, "rateBuy": 41.0, "rateSell": 41.5},
        {"currencyCodeA": 978, "currencyCodeB": 980, "date": 1700000000, "rateBuy": 44.5, "rateSell": 45.2},
        {"currencyCodeA": 978, "currencyCodeB": 840, "date": 1700000000, "rateBuy": 1.07, "rateSell": 1.09},
        {"currencyCodeA": 985, "currencyCodeB": 980, "date": 1700000000, "rateCross": 10.4},
    ]


def generate_transactions(
    account_id: str,
    start: int,
    end: int,
    step_seconds: int,
    amount: int,
    currency_code: int = 840,
) -> List[Dict[str, Any]]:
    """Evenly spaced statement items in [start, end], newest first"""
    items = [
        {
            "id": f"{account_id}-{ts}",
            "time": ts,
            "description": "Invoice payment",
            "mcc": 4829,
            "originalMcc": 4829,
            "amount": amount,
            "operationAmount": amount,
            "currencyCode": currency_code,
            "commissionRate": 0,
            "cashbackAmount": 0,
            "balance": 0,
            "hold": False,
            "counterName": "Client LLC",
        }
        for ts in range(start, end + 1, step_seconds)
    ]
    items.reverse()
    return items


def create_app(
    accounts: Optional[List[Dict[str, Any]]] = None,
    rates: Optional[List[Dict[str, Any]]] = None,
    statements: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    token: str = DEFAULT_TOKEN,
) -> FastAPI:
    """Build a mock server; requested statement ranges are recorded on app.state"""
    if statements is None:
        now = int(time.time())
        statements = {"fop-usd": generate_transactions("fop-usd", now - 20 * 86400, now, 3600, 25000)}

    app = FastAPI(title="Mock Monobank Server", version="1.0.0")
    app.state.statement_requests = []

    def check_token(x_token: Optional[str]) -> None:
        if x_token != token:
            raise HTTPException(status_code=403, detail="Unknown 'X-Token'")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/personal/client-info")
    def client_info(x_token: Optional[str] = Header(None)):
        check_token(x_token)
        return {
            "clientId": "mock-client",
            "name": "Mock FOP",
            "webHookUrl": "",
            "permissions": "psfj",
            "accounts": accounts if accounts is not None else sample_accounts(),
            "jars": [],
        }

    @app.post("/bank/currency")
    @app.get("/bank/currency")
    def currency():
        return rates if rates is not None else sample_rates()

    @app.get("/personal/statement/{account_id}/{from_time}/{to_time}")
    def statement(account_id: str, from_time: int, to_time: int, x_token: Optional[str] = Header(None)):
        check_token(x_token)
        if to_time - from_time > MAX_RANGE_SECONDS:
            raise HTTPException(status_code=400, detail="Period must be no more than 31 days")

        app.state.statement_requests.append((account_id, from_time, to_time))
        items = [txn for txn in statements.get(account_id, []) if from_time <= txn["time"] <= to_time]
        items.sort(key=lambda txn: txn["time"], reverse=True)
        return items[:PAGE_SIZE]

    return app


app = create_app()
