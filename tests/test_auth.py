"""Bearer token authentication and dev mode."""

import os
import time

from jose import jwt

ACCOUNT_ID = 1

GATEWAY_PAYLOAD = {
    "brandname": "Wunder Academy",
    "clientid": "93975",
    "secret": "soap-password",
    "environment": "live",
    "enabled": True,
}


def make_token(**claims) -> str:
    payload = {"sub": "7", "exp": int(time.time()) + 300}
    payload.update(claims)
    return jwt.encode(payload, os.environ["JWT_SECRET"], algorithm="HS256")


class TestBearerToken:
    def test_invalid_token_is_rejected(self, test_client):
        r = test_client.get(
            f"/paygw_mpay24/accounts/{ACCOUNT_ID}/gateway",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert r.status_code == 401

    def test_expired_token_is_rejected(self, test_client):
        token = make_token(exp=int(time.time()) - 10)
        r = test_client.get(
            f"/paygw_mpay24/accounts/{ACCOUNT_ID}/gateway",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert r.status_code == 401
        assert r.json()["detail"] == "Token expired"

    def test_non_admin_cannot_configure_gateway(self, test_client):
        token = make_token(role="user")
        r = test_client.put(
            f"/paygw_mpay24/accounts/{ACCOUNT_ID}/gateway",
            json=GATEWAY_PAYLOAD,
            headers={"Authorization": f"Bearer {token}"},
        )
        assert r.status_code == 403

    def test_admin_token_can_configure_gateway(self, test_client):
        token = make_token(role="admin")
        r = test_client.put(
            f"/paygw_mpay24/accounts/{ACCOUNT_ID}/gateway",
            json=GATEWAY_PAYLOAD,
            headers={"Authorization": f"Bearer {token}"},
        )
        assert r.status_code == 200
        assert r.json()["enabled"] is True


class TestAuthDevMode:
    """With AUTH_DEV_MODE=true, requests without a bearer token are accepted."""

    def test_dev_user_header_must_be_numeric(self, test_client):
        r = test_client.get(
            f"/paygw_mpay24/accounts/{ACCOUNT_ID}/gateway",
            headers={"X-Dev-User-Id": "abc"},
        )
        assert r.status_code == 400
