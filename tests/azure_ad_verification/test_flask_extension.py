"""
Tests for the AuthExtension Flask integration.

Tests the decorator-based access token validation.
"""

import pytest
from flask import Flask, g

import azure_ad_verification as m
from identity_provider import TENANT_ID


class FakeValidator:
    """Mock TokenValidator that accepts 'GOOD' tokens."""

    def validate(self, access_token: str) -> m.ValidationResult:
        if access_token != "GOOD":
            return m.ValidationResult(
                access_token=access_token,
                decoded_token=None,
                is_valid=False,
                validation_message="tenantId does not match",
            )
        decoded = m.DecodedToken(
            header={"alg": "HS256", "kid": "k1"},
            payload=m.TokenClaims({"sub": "u1", "tid": TENANT_ID, "scp": "Api.Read"}),
            signature="sig",
        )
        return m.ValidationResult(access_token=access_token, decoded_token=decoded, is_valid=True)


class UnavailableValidator:
    """Mock TokenValidator whose identity provider is down."""

    def validate(self, access_token: str) -> m.ValidationResult:
        raise m.MetadataFetchError('{"data": null, "status": 503}')


def protected(app: Flask, auth: m.AuthExtension) -> None:
    @app.get("/x")
    @auth.require()
    def x():  # type: ignore
        return {"sub": g.jwt["sub"], "tid": g.jwt["tid"], "valid": g.access_token.is_valid}


class TestAuthExtension:
    def test_missing_token_returns_401(self, app: Flask):
        protected(app, m.AuthExtension(FakeValidator()))

        r = app.test_client().get("/x")
        assert r.status_code == 401
        assert b"Missing token" in r.data

    def test_invalid_token_returns_401_with_reason(self, app: Flask):
        protected(app, m.AuthExtension(FakeValidator()))

        r = app.test_client().get("/x", headers={"Authorization": "Bearer BAD"})
        assert r.status_code == 401
        assert b"tenantId does not match" in r.data

    def test_valid_token_sets_g_and_allows(self, app: Flask):
        protected(app, m.AuthExtension(FakeValidator()))

        r = app.test_client().get("/x", headers={"Authorization": "Bearer GOOD"})
        assert r.status_code == 200
        assert r.get_json() == {"sub": "u1", "tid": TENANT_ID, "valid": True}

    def test_provider_failure_returns_503(self, app: Flask):
        protected(app, m.AuthExtension(UnavailableValidator()))

        r = app.test_client().get("/x", headers={"Authorization": "Bearer GOOD"})
        assert r.status_code == 503

    def test_init_app_registers_and_sets_validator(self, app: Flask):
        auth = m.AuthExtension()
        auth.init_app(app, validator=FakeValidator())
        protected(app, auth)

        assert app.extensions["azure_ad_verification"] is auth
        r = app.test_client().get("/x", headers={"Authorization": "Bearer GOOD"})
        assert r.status_code == 200

    def test_without_validator_raises(self, app: Flask):
        app.config["PROPAGATE_EXCEPTIONS"] = True
        protected(app, m.AuthExtension())

        with pytest.raises(RuntimeError):
            app.test_client().get("/x", headers={"Authorization": "Bearer GOOD"})
