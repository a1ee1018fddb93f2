"""Tests for scope classification, ScopeRef, the scope chain and RequestContext."""

import pytest

from scopegate.core.request_context import RequestContext
from scopegate.domain.enums import AuthMode, ScopeType
from scopegate.domain.exceptions import InvalidScopeException, MissingContextException
from scopegate.domain.value_objects import ScopeRef
from scopegate.infrastructure.persistence.scope_resolver import scope_chain


class TestScopeType:
    """ScopeType.classify is total over (organization, branch) pairs."""

    def test_classify(self) -> None:
        assert ScopeType.classify(None, None) is ScopeType.GLOBAL
        assert ScopeType.classify("org1", None) is ScopeType.ORG_WIDE
        assert ScopeType.classify("org1", "br1") is ScopeType.BRANCH

    def test_branch_without_organization_is_global(self) -> None:
        assert ScopeType.classify(None, "br1") is ScopeType.GLOBAL

    @pytest.mark.parametrize("organization_id", [None, "org1"])
    @pytest.mark.parametrize("branch_id", [None, "br1"])
    def test_classify_is_total(self, organization_id, branch_id) -> None:
        scope = ScopeType.classify(organization_id, branch_id)
        assert scope in set(ScopeType)
        is_branch = organization_id is not None and branch_id is not None
        assert (scope is ScopeType.BRANCH) == is_branch

    def test_priority_orders_broadest_first(self) -> None:
        ordered = sorted(
            [ScopeType.BRANCH, ScopeType.GLOBAL, ScopeType.ORG_WIDE],
            key=lambda s: s.priority,
        )
        assert ordered == [ScopeType.GLOBAL, ScopeType.ORG_WIDE, ScopeType.BRANCH]

    def test_values_and_labels(self) -> None:
        assert ScopeType.values() == ["global", "org-wide", "branch"]
        assert ScopeType.ORG_WIDE.label == "Organization-wide"


class TestAuthMode:
    def test_current_follows_settings(self) -> None:
        assert AuthMode.current() is AuthMode.STANDALONE
        assert AuthMode.STANDALONE.is_standalone
        assert not AuthMode.CONSOLE.is_standalone


class TestScopeRef:
    def test_shapes(self) -> None:
        assert ScopeRef().scope_type is ScopeType.GLOBAL
        assert ScopeRef("org1").scope_type is ScopeType.ORG_WIDE
        assert ScopeRef("org1", "br1").scope_type is ScopeType.BRANCH
        assert ScopeRef().is_global
        assert not ScopeRef("org1").is_global

    def test_branch_without_organization_rejected(self) -> None:
        with pytest.raises(InvalidScopeException) as exc_info:
            ScopeRef(None, "br1")
        assert exc_info.value.error_code == "INVALID_SCOPE"
        assert exc_info.value.details["branch_id"] == "br1"

    def test_empty_strings_are_absent(self) -> None:
        ref = ScopeRef("", "")
        assert ref.organization_id is None
        assert ref.branch_id is None

    def test_to_dict(self) -> None:
        assert ScopeRef("org1", "br1").to_dict() == {
            "organization_id": "org1",
            "branch_id": "br1",
            "scope": "branch",
        }


class TestScopeChain:
    """Only the fixed chain global -> org-wide -> exact branch is effective."""

    def test_no_organization(self) -> None:
        assert scope_chain(ScopeRef()) == [ScopeRef()]

    def test_organization(self) -> None:
        assert scope_chain(ScopeRef("org1")) == [ScopeRef(), ScopeRef("org1")]

    def test_branch(self) -> None:
        assert scope_chain(ScopeRef("org1", "br1")) == [
            ScopeRef(),
            ScopeRef("org1"),
            ScopeRef("org1", "br1"),
        ]


class TestRequestContext:
    def test_defaults(self) -> None:
        context = RequestContext()
        assert not context.has_organization()
        assert not context.has_branch()
        assert not context.has_team()
        assert context.service_role_level == 0
        assert not context.has_organization_wide_access()

    def test_require_raises_missing_context(self) -> None:
        context = RequestContext()
        for require, dimension in (
            (context.require_organization_id, "organization"),
            (context.require_branch_id, "branch"),
            (context.require_team_id, "team"),
        ):
            with pytest.raises(MissingContextException) as exc_info:
                require()
            assert exc_info.value.details == {"dimension": dimension}

    def test_branch_access_without_organization_wide_level(self) -> None:
        context = RequestContext("org1", "br1", service_role_level=50)
        assert context.can_access_branch("br1")
        assert not context.can_access_branch("br2")

    def test_organization_wide_access_sees_every_branch_and_team(self) -> None:
        context = RequestContext("org1", "br1", team_id="t1").with_access("admin", "admin", 100)
        assert context.has_organization_wide_access()
        assert context.can_access_branch("br2")
        assert context.can_access_team("t2")

    def test_threshold_is_configurable(self) -> None:
        context = RequestContext(
            "org1", service_role_level=50, organization_wide_access_level=50
        )
        assert context.has_organization_wide_access()

    def test_with_access_returns_copy(self) -> None:
        context = RequestContext("org1")
        updated = context.with_access("owner", "manager", 50)
        assert context.service_role is None
        assert updated.service_role == "manager"
        assert updated.organization_role == "owner"
        assert updated.organization_id == "org1"

    def test_scope(self) -> None:
        assert RequestContext("org1", "br1").scope() == ScopeRef("org1", "br1")

    def test_to_dict(self) -> None:
        data = RequestContext("org1", "br1", branch_name="Main").to_dict()
        assert data["organization_id"] == "org1"
        assert data["branch_name"] == "Main"
        assert data["has_organization_wide_access"] is False
