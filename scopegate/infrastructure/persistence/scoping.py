"""Scope and mode hooks for ORM models.

Write path (before_flush on every Session):
- new mode-tagged rows get is_standalone from the session's mode when unset;
- new scoped rows get empty organization_id / branch_id / team_id from the
  RequestContext bound to the session;
- on dirty rows, changes to those columns are reverted when the original
  value was non-null.

Read path: plain select() stays unfiltered. Callers opt in with the
statement helpers below (only_current_mode, in_current_organization, ...).
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select, event, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from scopegate.core.constants import SESSION_CONTEXT_KEY, SESSION_MODE_KEY
from scopegate.core.request_context import RequestContext
from scopegate.domain.enums import AuthMode
from scopegate.infrastructure.persistence.models.mixins import (
    is_mode_tagged,
    scope_fields_of,
)

logger = logging.getLogger(__name__)


def bind_request_context(
    session: AsyncSession | Session, context: RequestContext | None
) -> None:
    """Make context the source for scope auto-fill on this session's flushes."""
    session.info[SESSION_CONTEXT_KEY] = context


def bind_auth_mode(session: AsyncSession | Session, mode: AuthMode) -> None:
    """Override the process-wide mode for rows stamped by this session."""
    session.info[SESSION_MODE_KEY] = mode


def _session_mode(session: Session) -> AuthMode:
    mode = session.info.get(SESSION_MODE_KEY)
    return AuthMode(mode) if mode is not None else AuthMode.current()


def _fill_new(obj: Any, context: RequestContext | None, mode: AuthMode) -> None:
    model = type(obj)
    if is_mode_tagged(model) and obj.is_standalone is None:
        obj.is_standalone = mode.is_standalone
    if context is None:
        return
    for name in scope_fields_of(model):
        if getattr(obj, name) is None:
            value = getattr(context, name, None)
            if value is not None:
                setattr(obj, name, value)


def _guarded_fields(model: type) -> list[str]:
    fields = list(scope_fields_of(model))
    if is_mode_tagged(model):
        fields.append("is_standalone")
    return fields


def _revert_guarded(obj: Any) -> None:
    fields = _guarded_fields(type(obj))
    if not fields:
        return
    state = inspect(obj)
    for name in fields:
        history = state.attrs[name].history
        if not history.has_changes() or not history.deleted:
            continue
        original = history.deleted[0]
        if original is None:
            continue
        logger.debug(
            "Reverting change of %s.%s on %s", type(obj).__name__, name, state.identity
        )
        setattr(obj, name, original)


@event.listens_for(Session, "before_flush")
def _apply_scope_hooks(session: Session, flush_context: Any, instances: Any) -> None:
    context = session.info.get(SESSION_CONTEXT_KEY)
    mode: AuthMode | None = None
    for obj in session.new:
        model = type(obj)
        if not (is_mode_tagged(model) or scope_fields_of(model)):
            continue
        if mode is None:
            mode = _session_mode(session)
        _fill_new(obj, context, mode)
    for obj in session.dirty:
        _revert_guarded(obj)


# ---- Read-side statement helpers ----


def _require_mode_tagged(model: type) -> None:
    if not is_mode_tagged(model):
        raise TypeError(f"{model.__name__} is not mode-tagged")


def only_mode(stmt: Select, model: type, mode: AuthMode) -> Select:
    """Restrict stmt to rows created in mode."""
    _require_mode_tagged(model)
    return stmt.where(model.is_standalone.is_(mode.is_standalone))


def only_standalone(stmt: Select, model: type) -> Select:
    return only_mode(stmt, model, AuthMode.STANDALONE)


def only_console(stmt: Select, model: type) -> Select:
    return only_mode(stmt, model, AuthMode.CONSOLE)


def only_current_mode(
    stmt: Select, model: type, mode: AuthMode | None = None
) -> Select:
    """Restrict stmt to the configured mode (or the given override)."""
    return only_mode(stmt, model, mode or AuthMode.current())


def for_organization(stmt: Select, model: type, organization_id: str) -> Select:
    return stmt.where(model.organization_id == organization_id)


def for_branch(stmt: Select, model: type, branch_id: str) -> Select:
    return stmt.where(model.branch_id == branch_id)


def for_team(stmt: Select, model: type, team_id: str) -> Select:
    return stmt.where(model.team_id == team_id)


def in_current_organization(
    stmt: Select, model: type, context: RequestContext
) -> Select:
    """Filter by the context organization; MissingContextException when absent."""
    return for_organization(stmt, model, context.require_organization_id())


def in_current_branch(stmt: Select, model: type, context: RequestContext) -> Select:
    """Filter by the context branch; MissingContextException when absent."""
    return for_branch(stmt, model, context.require_branch_id())


def in_current_team(stmt: Select, model: type, context: RequestContext) -> Select:
    """Filter by the context team; MissingContextException when absent."""
    return for_team(stmt, model, context.require_team_id())


def in_current_context(stmt: Select, model: type, context: RequestContext) -> Select:
    """Organization filter (required) plus branch filter when the context has one."""
    stmt = in_current_organization(stmt, model, context)
    if context.has_branch() and "branch_id" in scope_fields_of(model):
        stmt = for_branch(stmt, model, context.branch_id)
    return stmt
