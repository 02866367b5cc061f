"""
Tests for the claims policy engine.

Tests rule semantics and the first-failure ordering contract.
"""

import pytest

import azure_ad_verification as m
from azure_ad_verification.policy import application_rule, scopes_rule, tenant_rule
from identity_provider import APP_ID, TENANT_ID


def policy(**overrides) -> m.ClaimsPolicy:
    values = {
        "tenant_id": TENANT_ID,
        "audience": "api://aud",
        "metadata_document_uri": "https://idp.example/.well-known/openid-configuration",
        **overrides,
    }
    return m.ClaimsPolicy.from_options(m.ValidationOptions(**values))


class TestTenantRule:
    def test_matching_tenant_passes(self):
        assert policy().evaluate({"tid": TENANT_ID}).is_valid

    @pytest.mark.parametrize("claims", [{}, {"tid": ""}, {"tid": "other"}, {"tid": 42}])
    def test_missing_or_mismatched_tenant_fails(self, claims):
        result = policy().evaluate(claims)

        assert result == m.RuleResult(is_valid=False, validation_message="tenantId does not match")


class TestApplicationRule:
    def test_no_allow_list_passes_without_app_id(self):
        assert policy().evaluate({"tid": TENANT_ID}).is_valid

    def test_empty_allow_list_passes(self):
        assert policy(allowed_application_ids=()).evaluate({"tid": TENANT_ID}).is_valid

    def test_listed_appid_passes(self):
        assert policy(allowed_application_ids=[APP_ID]).evaluate({"tid": TENANT_ID, "appid": APP_ID}).is_valid

    def test_azp_preferred_over_appid(self):
        p = policy(allowed_application_ids=["v2-client"])

        assert p.evaluate({"tid": TENANT_ID, "azp": "v2-client", "appid": "v1-client"}).is_valid
        assert not p.evaluate({"tid": TENANT_ID, "azp": "v1-client", "appid": "v2-client"}).is_valid

    def test_missing_app_id_fails(self):
        result = policy(allowed_application_ids=[APP_ID]).evaluate({"tid": TENANT_ID})

        assert result.validation_message == "authenticated applicationId not in allowed list"

    def test_unlisted_app_id_fails(self):
        result = policy(allowed_application_ids=[APP_ID]).evaluate({"tid": TENANT_ID, "azp": "other"})

        assert result.validation_message == "authenticated applicationId not in allowed list"


class TestScopesRule:
    def test_no_requirement_passes(self):
        assert policy().evaluate({"tid": TENANT_ID}).is_valid

    def test_all_required_scopes_present(self):
        p = policy(required_scopes=["Api.Read", "Api.Write"])

        assert p.evaluate({"tid": TENANT_ID, "scp": "Api.Write Other Api.Read"}).is_valid

    @pytest.mark.parametrize("scp", [None, "", "Api.Read", "Api.ReadApi.Write"])
    def test_missing_scope_fails(self, scp):
        claims = {"tid": TENANT_ID}
        if scp is not None:
            claims["scp"] = scp

        result = policy(required_scopes=["Api.Read", "Api.Write"]).evaluate(claims)

        assert result.validation_message == "required scopes missing"


class TestOrdering:
    def test_rule_order(self):
        assert policy().rule_names == ("tenant", "application", "scopes")

    def test_first_failure_wins(self):
        p = policy(allowed_application_ids=[APP_ID], required_scopes=["Api.Read"])

        assert p.evaluate({"tid": "other"}).validation_message == "tenantId does not match"
        assert (
            p.evaluate({"tid": TENANT_ID, "azp": "other"}).validation_message
            == "authenticated applicationId not in allowed list"
        )
        assert p.evaluate({"tid": TENANT_ID, "azp": APP_ID}).validation_message == "required scopes missing"

    def test_later_rules_not_evaluated_after_failure(self):
        calls: list[str] = []

        def rule(name: str, ok: bool) -> m.ValidationRule[str]:
            def predicate(_value: str) -> bool:
                calls.append(name)
                return ok

            return m.ValidationRule(predicate=predicate, invalid_message=f"{name} failed", name=name)

        result = m.validate_rules("x", [rule("a", True), rule("b", False), rule("c", False)])

        assert result.validation_message == "b failed"
        assert calls == ["a", "b"]


def test_evaluate_claims_uses_standard_policy():
    options = m.ValidationOptions(
        tenant_id=TENANT_ID,
        audience="api://aud",
        metadata_document_uri="https://idp.example/",
        required_scopes=("Api.Read",),
    )

    assert m.evaluate_claims({"tid": TENANT_ID, "scp": "Api.Read"}, options).is_valid
    assert not m.evaluate_claims({"tid": TENANT_ID}, options).is_valid


def test_custom_rules():
    p = m.ClaimsPolicy([tenant_rule(TENANT_ID), application_rule(None), scopes_rule(["x"])])

    assert p.evaluate({"tid": TENANT_ID, "scp": "x"}) == m.RuleResult(is_valid=True)
