"""Tests for credential issuance and inspection endpoints."""

import pytest

from quotagate.core.quota import MAX_REQUESTS, MAX_WINDOW_SECONDS


class TestIssueToken:
    def test_issues_credential_with_requested_quota(self, make_client) -> None:
        client = make_client()

        resp = client.get("/token", params={"max": 3, "interval": 45})

        assert resp.status_code == 200
        body = resp.json()
        assert body["max_requests"] == 3
        assert body["window_seconds"] == 45
        assert body["subject"] == "_generic"
        claims = client.app.state.credential_authority.validate(body["token"])
        assert claims.quota.max_requests == 3

    def test_custom_subject(self, make_client) -> None:
        client = make_client()

        resp = client.get("/token", params={"max": 1, "interval": 1, "subject": "partner-42"})

        assert resp.status_code == 200
        assert resp.json()["subject"] == "partner-42"

    @pytest.mark.parametrize(
        "params",
        [
            {"interval": 10},
            {"max": 10},
            {"max": 0, "interval": 10},
            {"max": 10, "interval": -5},
            {"max": "ten", "interval": 10},
            {"max": 5, "interval": 10**400},
            {"max": 5, "interval": MAX_WINDOW_SECONDS + 1},
            {"max": MAX_REQUESTS + 1, "interval": 10},
        ],
    )
    def test_rejects_invalid_quota_params(self, make_client, params: dict) -> None:
        client = make_client()

        resp = client.get("/token", params=params)

        assert resp.status_code == 422

    def test_issuance_is_not_rate_limited(self, make_client) -> None:
        client = make_client(ip_max_requests=1)

        for _ in range(3):
            assert client.get("/token", params={"max": 1, "interval": 1}).status_code == 200

    def test_issued_credential_is_enforced(self, make_client) -> None:
        client = make_client(ip_max_requests=100)
        token = client.get("/token", params={"max": 1, "interval": 120}).json()["token"]

        assert client.get("/", headers={"API_KEY": token}).status_code == 200
        assert client.get("/", headers={"API_KEY": token}).status_code == 429


class TestDecodeToken:
    def test_decodes_valid_credential(self, make_client) -> None:
        client = make_client()
        token = client.get("/token", params={"max": 7, "interval": 30}).json()["token"]

        resp = client.get("/token/decode", headers={"API_KEY": token})

        assert resp.status_code == 200
        body = resp.json()
        assert body["valid"] is True
        assert body["max_requests"] == 7
        assert body["window_seconds"] == 30

    def test_missing_header_returns_401(self, make_client) -> None:
        client = make_client()

        resp = client.get("/token/decode")

        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "credential_missing"

    def test_forged_credential_returns_401(self, make_client, encode_claims) -> None:
        client = make_client()
        forged = encode_claims(secret="someone-elses-secret-0123456789abcdef0123")

        resp = client.get("/token/decode", headers={"API_KEY": forged})

        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "credential_invalid_signature"

    def test_decoding_does_not_consume_quota(self, make_client) -> None:
        client = make_client()
        token = client.get("/token", params={"max": 1, "interval": 60}).json()["token"]

        for _ in range(3):
            assert client.get("/token/decode", headers={"API_KEY": token}).status_code == 200
        assert client.get("/", headers={"API_KEY": token}).status_code == 200


def test_oversized_window_credential_is_denied_not_500(make_client, encode_claims) -> None:
    client = make_client(ip_max_requests=100)
    token = encode_claims(max_access=5, interval_access=10**400)

    resp = client.get("/", headers={"API_KEY": token})

    assert resp.status_code == 429
    assert resp.text == "Rate limit exceeded"
