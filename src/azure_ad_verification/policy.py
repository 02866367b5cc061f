"""Claims policy: ordered authorization rules over verified token claims.

Rules run strictly in order and evaluation stops at the first failure, so
the reported message always names the earliest rule that failed:

1. ``tenant``       the ``tid`` claim equals the configured tenant id
2. ``application``  the calling application is in the allow-list, if any
3. ``scopes``       every required scope is present in ``scp``, if any

Security Notes
--------------
Every rule is fail-closed: an absent or malformed claim fails the rule. An
empty or absent allow-list or scope requirement is the only way a rule passes
without looking at the token.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .models import TokenClaims

if TYPE_CHECKING:
    from .config import ValidationOptions

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ValidationRule(Generic[T]):
    """A named predicate with the message reported when it does not hold."""

    predicate: Callable[[T], bool]
    invalid_message: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class RuleResult:
    is_valid: bool
    validation_message: str | None = None


def validate_rules(value: T, rules: Sequence[ValidationRule[T]]) -> RuleResult:
    """Apply ``rules`` to ``value`` in order, stopping at the first failure."""
    for rule in rules:
        if not rule.predicate(value):
            return RuleResult(is_valid=False, validation_message=rule.invalid_message)
    return RuleResult(is_valid=True)


def tenant_rule(tenant_id: str) -> ValidationRule[TokenClaims]:
    return ValidationRule(
        predicate=lambda claims: claims.tenant_id is not None and claims.tenant_id == tenant_id,
        invalid_message="tenantId does not match",
        name="tenant",
    )


def application_rule(allowed_application_ids: Sequence[str] | None) -> ValidationRule[TokenClaims]:
    allowed = frozenset(allowed_application_ids or ())

    def predicate(claims: TokenClaims) -> bool:
        if not allowed:
            return True
        app_id = claims.application_id
        return app_id is not None and app_id in allowed

    return ValidationRule(
        predicate=predicate,
        invalid_message="authenticated applicationId not in allowed list",
        name="application",
    )


def scopes_rule(required_scopes: Sequence[str] | None) -> ValidationRule[TokenClaims]:
    required = frozenset(required_scopes or ())
    return ValidationRule(
        predicate=lambda claims: required.issubset(claims.scopes),
        invalid_message="required scopes missing",
        name="scopes",
    )


class ClaimsPolicy:
    """Evaluates the configured claim rules against a token payload.

    Args:
        rules: Rules in evaluation order. Use ``from_options`` for the
            standard tenant/application/scopes sequence.

    Examples:
        >>> policy = ClaimsPolicy([tenant_rule("t1")])
        >>> policy.evaluate({"tid": "t1"})
        RuleResult(is_valid=True, validation_message=None)
        >>> policy.evaluate({"tid": "other"}).validation_message
        'tenantId does not match'
    """

    def __init__(self, rules: Sequence[ValidationRule[TokenClaims]]) -> None:
        self._rules = tuple(rules)

    @classmethod
    def from_options(cls, options: ValidationOptions) -> ClaimsPolicy:
        return cls(
            [
                tenant_rule(options.tenant_id),
                application_rule(options.allowed_application_ids),
                scopes_rule(options.required_scopes),
            ]
        )

    @property
    def rule_names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self._rules)

    def evaluate(self, claims: Mapping[str, Any]) -> RuleResult:
        if not isinstance(claims, TokenClaims):
            claims = TokenClaims(claims)
        return validate_rules(claims, self._rules)


def evaluate_claims(claims: Mapping[str, Any], options: ValidationOptions) -> RuleResult:
    """Evaluate the standard claims policy for ``options`` against ``claims``."""
    return ClaimsPolicy.from_options(options).evaluate(claims)
