from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError


class RouteConfigError(ValueError):
    """Raised when the route security YAML is invalid."""


class DefaultRule(BaseModel):
    auth_required: bool = True
    scopes: list[str] = Field(default_factory=list)
    entitlements: list[str] = Field(default_factory=list)


class RouteRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    # Any one of the listed values is enough.
    scopes: list[str] = Field(default_factory=list)
    entitlements: list[str] = Field(default_factory=list)

    def normalized_methods(self) -> set[str]:
        return {m.upper() for m in self.methods}


class SecurityConfigModel(BaseModel):
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class EffectiveRule:
    """
    Fully-resolved rule (defaults applied) for a particular request.
    """

    auth_required: bool
    scopes: frozenset[str]
    entitlements: frozenset[str]


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    # Convert "/resources/{id}" -> r"^/resources/[^/]+$"
    regex = re.sub(r"\{[^/]+\}", r"[^/]+", path_template)
    return re.compile(rf"^{regex}$")


class SecurityConfig:
    """
    Runtime helper around validated route rules + route matching.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model

        self._exact_rules: dict[str, list[RouteRule]] = {}
        for r in self.model.routes:
            self._exact_rules.setdefault(r.path, []).append(r)
        self._compiled_rules = [(_path_template_to_regex(rule.path), rule) for rule in self.model.routes]

    def match(self, path: str, method: str) -> EffectiveRule:
        """
        Find the best matching rule for (path, method), then apply defaults.
        """

        method = method.upper()
        default = self.model.default

        # 1) exact path match
        for candidate in self._exact_rules.get(path, []):
            if method in candidate.normalized_methods():
                return _effective(candidate, default)

        # 2) template match
        for regex, candidate in self._compiled_rules:
            if method in candidate.normalized_methods() and regex.match(path):
                return _effective(candidate, default)

        # 3) no match -> defaults
        return EffectiveRule(
            auth_required=default.auth_required,
            scopes=frozenset(default.scopes),
            entitlements=frozenset(default.entitlements),
        )


def _effective(rule: RouteRule, default: DefaultRule) -> EffectiveRule:
    # A rule that asks for scopes or entitlements needs a token even if the
    # global default is public.
    inferred_auth_required = default.auth_required or bool(rule.scopes) or bool(rule.entitlements)

    return EffectiveRule(
        auth_required=inferred_auth_required if rule.auth_required is None else rule.auth_required,
        scopes=frozenset(rule.scopes or default.scopes),
        entitlements=frozenset(rule.entitlements or default.entitlements),
    )


def load_security_config(path: Path) -> SecurityConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: Any = yaml.safe_load(raw_text) or {}

    if not isinstance(raw, dict) or "security" not in raw:
        raise RouteConfigError(f"Missing top-level 'security' key in config: {path}")

    try:
        model = SecurityConfigModel.model_validate(raw["security"] or {})
    except PydanticValidationError as e:
        raise RouteConfigError(f"Invalid security config {path}: {e}") from e
    return SecurityConfig(model)
