"""Scope resolution: which stored assignments are effective in a context.

The scope chain of a context is:
- no organization: global assignments only;
- organization: global + that organization's org-wide assignments;
- organization + branch: the above + assignments at exactly that branch.

Resolution is a single disjunctive predicate evaluated by the database.
Sibling branches never contribute to each other and there is no
parent/child walk beyond this fixed chain.
"""

from typing import Any

from sqlalchemy import ColumnElement, and_, or_

from scopegate.domain.value_objects import ScopeRef


def scope_chain(scope: ScopeRef) -> list[ScopeRef]:
    """The exact (organization, branch) pairs effective in scope, broadest first."""
    chain = [ScopeRef()]
    if scope.organization_id is not None:
        chain.append(ScopeRef(scope.organization_id))
        if scope.branch_id is not None:
            chain.append(ScopeRef(scope.organization_id, scope.branch_id))
    return chain


def effective_scope_clause(
    model: Any,
    organization_id: str | None = None,
    branch_id: str | None = None,
) -> ColumnElement[bool]:
    """WHERE clause over model.organization_id / model.branch_id for the given context.

    Raises:
        InvalidScopeException: branch_id given without organization_id.
    """
    scope = ScopeRef(organization_id, branch_id)
    disjuncts = []
    for link in scope_chain(scope):
        org_cond = (
            model.organization_id.is_(None)
            if link.organization_id is None
            else model.organization_id == link.organization_id
        )
        branch_cond = (
            model.branch_id.is_(None)
            if link.branch_id is None
            else model.branch_id == link.branch_id
        )
        disjuncts.append(and_(org_cond, branch_cond))
    return or_(*disjuncts)
