import inspect

import pytest
from fastapi.testclient import TestClient

from confidential_ledger.api.routes import router
from confidential_ledger.api.server import app
from confidential_ledger.crypto.commitment import make_credit


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _secret_json(secret):
    return {
        "credit_value": secret.credit_value,
        "secret_blinding": secret.secret_blinding.hex(),
    }


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_make_credit(client):
    response = client.post("/vcl/make_credit", json={"credit_value": 100})
    assert response.status_code == 200
    body = response.json()
    assert len(body["credit"]) == 66
    assert body["secret"]["credit_value"] == 100
    assert len(body["secret"]["secret_blinding"]) == 64


def test_make_credit_negative_value(client):
    response = client.post("/vcl/make_credit", json={"credit_value": -1})
    assert response.status_code == 422


def test_range_proof_roundtrip(client):
    issued = client.post("/vcl/make_credit", json={"credit_value": 42}).json()
    proved = client.post(
        "/vcl/prove_range",
        json={**issued["secret"], "credit": issued["credit"]},
    )
    assert proved.status_code == 200
    assert proved.json()["credit"] == issued["credit"]

    verified = client.post(
        "/vcl/verify_range",
        json={"credit": issued["credit"], "proof": proved.json()["proof"]},
    )
    assert verified.status_code == 200
    assert verified.json() == {"valid": True}


def test_range_proof_against_other_credit(client):
    _, secret = make_credit(5)
    other, _ = make_credit(5)
    proof = client.post("/vcl/prove_range", json=_secret_json(secret)).json()["proof"]
    response = client.post("/vcl/verify_range", json={"credit": other.hex(), "proof": proof})
    assert response.status_code == 200
    assert response.json() == {"valid": False}


def test_prove_range_inconsistent_secret(client):
    credit, _ = make_credit(5)
    _, secret = make_credit(5)
    response = client.post(
        "/vcl/prove_range",
        json={**_secret_json(secret), "credit": credit.hex()},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InconsistentSecret"


def test_malformed_blinding_is_client_error(client):
    response = client.post(
        "/vcl/prove_range",
        json={"credit_value": 5, "secret_blinding": "not-hex"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "MalformedEncoding"


def test_malformed_credit_is_client_error(client):
    response = client.post(
        "/vcl/verify_range",
        json={"credit": "04" + "00" * 32, "proof": "52"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "MalformedEncoding"


def test_malformed_proof_is_client_error(client):
    credit, _ = make_credit(5)
    response = client.post("/vcl/verify_range", json={"credit": credit.hex(), "proof": "5201"})
    assert response.status_code == 400
    assert response.json()["error"] == "MalformedProof"


def test_sum_balance_roundtrip(client):
    secrets = [make_credit(v)[1] for v in (100, 60, 40)]
    proved = client.post(
        "/vcl/prove_sum_balance",
        json={
            "total": _secret_json(secrets[0]),
            "first": _secret_json(secrets[1]),
            "second": _secret_json(secrets[2]),
        },
    )
    assert proved.status_code == 200
    body = proved.json()
    assert len(body["credits"]) == 3

    verified = client.post("/vcl/verify_sum_balance", json=body)
    assert verified.status_code == 200
    assert verified.json() == {"valid": True}


def test_sum_balance_unbalanced(client):
    secrets = [make_credit(v)[1] for v in (100, 60, 41)]
    response = client.post(
        "/vcl/prove_sum_balance",
        json={
            "total": _secret_json(secrets[0]),
            "first": _secret_json(secrets[1]),
            "second": _secret_json(secrets[2]),
        },
    )
    assert response.status_code == 400
    assert response.json()["error"] == "UnbalancedInput"


def test_verify_sum_balance_needs_three_credits(client):
    credit, _ = make_credit(1)
    response = client.post(
        "/vcl/verify_sum_balance",
        json={"credits": [credit.hex(), credit.hex()], "proof": "53"},
    )
    assert response.status_code == 422


def test_sum_balance_with_caller_credits(client):
    issued = [make_credit(v) for v in (100, 60, 40)]
    credits = [credit.hex() for credit, _ in issued]
    response = client.post(
        "/vcl/prove_sum_balance",
        json={
            "total": _secret_json(issued[0][1]),
            "first": _secret_json(issued[1][1]),
            "second": _secret_json(issued[2][1]),
            "credits": credits,
        },
    )
    assert response.status_code == 200
    assert response.json()["credits"] == credits


def test_sum_balance_caller_credits_mismatch(client):
    issued = [make_credit(v) for v in (100, 60, 40)]
    other, _ = make_credit(60)
    response = client.post(
        "/vcl/prove_sum_balance",
        json={
            "total": _secret_json(issued[0][1]),
            "first": _secret_json(issued[1][1]),
            "second": _secret_json(issued[2][1]),
            "credits": [issued[0][0].hex(), other.hex(), issued[2][0].hex()],
        },
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InconsistentSecret"


def test_proof_routes_run_off_the_event_loop():
    # Proof work is CPU-bound; plain handlers are dispatched to the threadpool.
    for route in router.routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
