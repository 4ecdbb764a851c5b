"""Entity import domain service.

Runs the preview/apply cycle of an entity import: read a fresh snapshot,
let the matcher classify the rows, show the plan, and only on explicit
confirmation write the creates and updates in bounded batches.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional, Sequence

from reconkit.database.base import Database
from reconkit.domain.constants import MAX_BATCH_SIZE
from reconkit.domain.entities import MatchAction, MatchDecision, MatchResult, ParsedRow
from reconkit.domain.entity_kinds import CompareMode, EntityKindConfig, get_entity_kind
from reconkit.domain.errors import BlockingError, ValidationError
from reconkit.domain.matcher import match_rows
from reconkit.domain.row_reader import read_entity_rows
from reconkit.utils.chunking import chunked

logger = logging.getLogger(__name__)


class ImportService:
    """Service for importing bank accounts, employees, contacts and categories."""

    def __init__(self, db: Database):
        """Initialize import service.

        Args:
            db: Database instance
        """
        self.db = db

    def preview(
        self,
        kind: str,
        rows: Sequence[ParsedRow],
        only_create: bool = False,
        promote_first_created: Optional[bool] = None,
    ) -> MatchResult:
        """Classify rows against the stored entities without writing anything.

        Blocking problems (e.g. two rows claiming the default flag) come back
        as a result with errors and no decisions, so the caller can show them
        in place of the plan.
        """
        config = get_entity_kind(kind)
        existing = self.db.list_entities(config.name)
        try:
            return match_rows(
                rows,
                existing,
                config,
                only_create=only_create,
                promote_first_created=promote_first_created,
            )
        except BlockingError as e:
            logger.warning("%s import blocked: %s", config.label, e)
            return MatchResult(kind=config.name, errors=(str(e),))

    def apply(self, result: MatchResult, batch_size: int = MAX_BATCH_SIZE) -> dict[str, int]:
        """Write a previewed plan.

        Args:
            result: Result of ``preview``
            batch_size: Entity writes per commit, capped at MAX_BATCH_SIZE

        Returns:
            Dict with counts: created, updated, skipped, batches

        Raises:
            ValidationError: If the plan is blocked or the batch size is not positive
        """
        if result.blocked:
            raise ValidationError(f"Cannot apply a blocked import: {'; '.join(result.errors)}")
        if batch_size <= 0:
            raise ValidationError(f"Batch size must be positive, got {batch_size}")
        batch_size = min(batch_size, MAX_BATCH_SIZE)

        config = get_entity_kind(result.kind)
        writes = [
            decision for decision in result.decisions
            if decision.action in (MatchAction.CREATE, MatchAction.UPDATE)
        ]

        created_ids: dict[int, int] = {}
        batches = 0
        for chunk in chunked(writes, batch_size):
            creates = [decision for decision in chunk if decision.action == MatchAction.CREATE]
            updates = [decision for decision in chunk if decision.action == MatchAction.UPDATE]
            ids = self.db.apply_entity_batch(
                config.name,
                [_create_values(config, decision.row) for decision in creates],
                [(decision.existing_id, _update_values(config, decision.row)) for decision in updates],
            )
            for decision, entity_id in zip(creates, ids):
                created_ids[decision.row_index] = entity_id
            batches += 1

        self._apply_exclusive_flag(config, result.decisions, created_ids)

        summary = result.summary
        counts = {
            "created": summary.to_create,
            "updated": summary.to_update,
            "skipped": summary.to_skip,
            "batches": batches,
        }
        logger.info(
            "Imported %s: %d created, %d updated, %d skipped in %d batches",
            config.name,
            counts["created"],
            counts["updated"],
            counts["skipped"],
            batches,
        )
        return counts

    def _apply_exclusive_flag(
        self,
        config: EntityKindConfig,
        decisions: Sequence[MatchDecision],
        created_ids: dict[int, int],
    ) -> None:
        rule = config.exclusive_flag
        if rule is None:
            return
        holder = next((decision for decision in decisions if decision.holds_flag), None)
        if holder is None:
            return
        # Skipped rows that matched a stored entity carry its id
        entity_id = created_ids.get(holder.row_index, holder.existing_id)
        logger.debug("Setting %s on %s %s", rule.field, config.name, entity_id)
        self.db.set_exclusive_flag(config.name, rule.field, entity_id)

    def import_file(
        self,
        kind: str,
        csv_file_path: str | Path,
        apply: bool = False,
        only_create: bool = False,
        batch_size: int = MAX_BATCH_SIZE,
    ) -> dict[str, Any]:
        """Read, preview and optionally apply an entity file.

        Args:
            kind: Entity kind name (e.g. "bank_account", "contacts")
            csv_file_path: Path to CSV file
            apply: If True, write the plan unless it is blocked
            only_create: Skip rows that match an existing entity
            batch_size: Entity writes per commit

        Returns:
            Dict with:
            - result: MatchResult (reader warnings included)
            - row_errors: rows dropped by the reader
            - applied: counts from ``apply``, or None when nothing was written

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            NotFoundError: If the kind is unknown
        """
        config = get_entity_kind(kind)
        try:
            read = read_entity_rows(config, csv_file_path)
        except BlockingError as e:
            logger.warning("%s import blocked: %s", config.label, e)
            return {
                "result": MatchResult(kind=config.name, errors=(str(e),)),
                "row_errors": [],
                "applied": None,
            }

        result = self.preview(config.name, read.rows, only_create=only_create)
        result = replace(result, warnings=tuple(read.warnings) + result.warnings)

        applied = None
        if apply and not result.blocked:
            applied = self.apply(result, batch_size=batch_size)
        return {"result": result, "row_errors": list(read.errors), "applied": applied}


def _create_values(config: EntityKindConfig, row: ParsedRow) -> dict[str, Any]:
    # The exclusive flag is only ever set through set_exclusive_flag
    flag = config.exclusive_flag.field if config.exclusive_flag else None
    values = {"name": row.name}
    for spec in config.fields:
        if spec.name in ("name", flag):
            continue
        value = row.get(spec.name)
        if value is not None:
            values[spec.name] = value
    return values


def _update_values(config: EntityKindConfig, row: ParsedRow) -> dict[str, Any]:
    values = {}
    for name in config.compared:
        if name in config.ignored:
            continue
        spec = config.field(name)
        value = row.get(name)
        if spec.mode == CompareMode.PROMOTE_ONLY:
            continue
        if spec.mode == CompareMode.WHEN_PRESENT and value is None:
            continue
        values[name] = value
    return values
