"""Generic entity matcher.

Classifies parsed rows as create/update/skip against a snapshot of stored
entities. One algorithm serves every entity kind; the differences between
kinds live in ``EntityKindConfig``.

Matching is deliberately conservative: a row is only ever tied to a stored
entity through the kind's canonical identifying field. A row without that
field is created, never matched by name or by some other identifier, so two
distinct real-world entities that happen to share a name are not merged.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence

from reconkit.domain.constants import (
    REASON_ALREADY_EXISTS,
    REASON_DUPLICATE_IN_FILE,
    REASON_MISSING_REQUIRED,
    REASON_NO_CHANGES,
)
from reconkit.domain.entities import (
    ExistingEntity,
    MatchAction,
    MatchDecision,
    MatchResult,
    ParsedRow,
)
from reconkit.domain.entity_kinds import EntityKindConfig

logger = logging.getLogger(__name__)


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _build_index(
    existing: Sequence[ExistingEntity], config: EntityKindConfig
) -> dict[str, ExistingEntity]:
    index: dict[str, ExistingEntity] = {}
    for entity in existing:
        key = config.match_key(entity)
        # First stored entity wins so repeated runs resolve to the same id
        if key is not None and key not in index:
            index[key] = entity
    return index


def match_rows(
    rows: Sequence[ParsedRow],
    existing: Sequence[ExistingEntity],
    config: EntityKindConfig,
    only_create: bool = False,
    promote_first_created: Optional[bool] = None,
) -> MatchResult:
    """Classify incoming rows against existing entities of one kind.

    Args:
        rows: Parsed rows, in file order
        existing: Snapshot of stored entities of the same kind
        config: Kind configuration (identifying field, compared fields, flags)
        only_create: Route every matched row to skip ("already exists")
        promote_first_created: Override the kind's exclusive-flag promotion
            policy; None keeps the rule's own setting

    Returns:
        MatchResult with one decision per row, in input order, plus warnings
        and informational messages

    Raises:
        ExclusiveFlagError: If more than one row claims the kind's exclusive
            flag. No decisions are produced.
    """
    rule = config.exclusive_flag
    flag_claimant = rule.validate(rows) if rule is not None else None

    index = _build_index(existing, config)
    seen_keys: set[str] = set()
    decisions: list[MatchDecision] = []
    warnings: list[str] = []

    for row in rows:
        missing = [name for name in config.required_fields if _is_missing(row.get(name))]
        if missing:
            decisions.append(
                MatchDecision(row=row, action=MatchAction.SKIP, reason=REASON_MISSING_REQUIRED)
            )
            continue

        key = config.match_key(row)
        if key is None:
            warnings.append(
                f"Row {row.row_index}: '{row.name}' has no {config.identifier_label}; "
                "it will be created as new."
            )
            decisions.append(MatchDecision(row=row, action=MatchAction.CREATE))
            continue

        if key in seen_keys:
            decisions.append(
                MatchDecision(
                    row=row,
                    action=MatchAction.SKIP,
                    reason=REASON_DUPLICATE_IN_FILE,
                    match_key=key,
                )
            )
            continue
        seen_keys.add(key)

        entity = index.get(key)
        if entity is None:
            decisions.append(MatchDecision(row=row, action=MatchAction.CREATE, match_key=key))
            continue

        if only_create:
            decisions.append(
                MatchDecision(
                    row=row,
                    action=MatchAction.SKIP,
                    existing_id=entity.id,
                    reason=REASON_ALREADY_EXISTS,
                    match_key=key,
                )
            )
            continue

        changes = config.diff(row, entity)
        if not changes:
            decisions.append(
                MatchDecision(
                    row=row,
                    action=MatchAction.SKIP,
                    existing_id=entity.id,
                    reason=REASON_NO_CHANGES,
                    match_key=key,
                )
            )
        else:
            decisions.append(
                MatchDecision(
                    row=row,
                    action=MatchAction.UPDATE,
                    existing_id=entity.id,
                    changes=tuple(changes),
                    match_key=key,
                )
            )

    messages: list[str] = []
    if rule is not None:
        promote = rule.promote_first_created if promote_first_created is None else promote_first_created
        decisions, messages = _resolve_exclusive_flag(
            decisions, existing, config, flag_claimant, promote
        )

    result = MatchResult(
        kind=config.name,
        decisions=tuple(decisions),
        warnings=tuple(warnings),
        messages=tuple(messages),
    )
    summary = result.summary
    logger.debug(
        "Matched %d %s rows: %d create, %d update, %d skip",
        summary.total,
        config.name,
        summary.to_create,
        summary.to_update,
        summary.to_skip,
    )
    return result


def _resolve_exclusive_flag(
    decisions: list[MatchDecision],
    existing: Sequence[ExistingEntity],
    config: EntityKindConfig,
    claimant: Optional[ParsedRow],
    promote: bool,
) -> tuple[list[MatchDecision], list[str]]:
    """Work out who holds the exclusive flag after the run and say so.

    A claim only counts when the claiming row ends up tied to an entity:
    created, updated, or matched to a stored one. A claim on a row that is
    skipped for any other reason is reported as dropped and the run falls
    back to the current holder or to promotion.
    """
    rule = config.exclusive_flag
    noun = config.label.lower()
    flag = rule.label.lower()
    messages: list[str] = []

    if claimant is not None:
        position = next(
            i for i, decision in enumerate(decisions) if decision.row is claimant
        )
        decision = decisions[position]
        if decision.action != MatchAction.SKIP or decision.existing_id is not None:
            held = list(decisions)
            held[position] = replace(decision, holds_flag=True)
            messages.append(
                f"The {noun} '{claimant.name}' (row {claimant.row_index}) will be the {flag} one."
            )
            return held, messages
        messages.append(
            f"The {noun} '{claimant.name}' (row {claimant.row_index}) is marked as {flag} "
            f"but is skipped ({decision.reason}); the mark is ignored."
        )

    holder = rule.current_holder(existing)
    if holder is not None:
        messages.append(f"The current {flag} {noun} '{holder.name}' is kept.")
        return decisions, messages

    first_create = next(
        (i for i, decision in enumerate(decisions) if decision.action == MatchAction.CREATE),
        None,
    )
    if first_create is None:
        return decisions, messages

    decision = decisions[first_create]
    if not promote:
        messages.append(f"No {noun} is marked as {flag} and none will be promoted.")
        return decisions, messages

    promoted = list(decisions)
    promoted[first_create] = replace(decision, promoted=True, holds_flag=True)
    messages.append(
        f"The {noun} '{decision.row.name}' (row {decision.row_index}) will be marked as "
        f"{flag} (first one created; none was {flag})."
    )
    return promoted, messages
