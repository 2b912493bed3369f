# ============================================================================
# src/medication_reconciliation/reconciliation/engine.py
# ============================================================================
"""
Reconciliation Engine

Merges extracted medication commands into an existing medication list.

Algorithm, strictly ordered:
1. Stops first. Each stop name deactivates its matching active record. No
   match is a warning; several matches stop the most recently added one and
   add a warning.
2. Adds and updates. Each non-stop command either creates a new record (no
   active match), leaves the match alone ("continue"), or overwrites its
   dose, and its route / frequency when given ("add" / "update").
3. Sweep. Every record not yet classified is unchanged.

Because stops run first, "stop X ... start X" in one note deactivates the old
record and creates a fresh one.

The caller's list and records are never mutated: the engine works on a copy
of the list and replaces changed entries with modified copies.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from .fuzzy_matcher import FuzzyMatcher
from ..config import reconciliation_settings
from ..core.context import (
    ExtractedCommand,
    MedicationAction,
    MedicationRecord,
    ReconciliationMetadata,
    ReconciliationResult,
    parse_timestamp,
)
from ..utils.drug_name_normalizer import normalize_drug_name


logger = logging.getLogger(__name__)

ADDED = "added"
UPDATED = "updated"
STOPPED = "stopped"
UNCHANGED = "unchanged"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class ReconciliationEngine:
    """
    Example:
        engine = ReconciliationEngine()
        result = engine.reconcile(commands, stopped_names, existing,
                                  ReconciliationMetadata.now("Dr. Rao"))
    """

    def __init__(
        self,
        matcher: Optional[FuzzyMatcher] = None,
        min_name_length: Optional[int] = None,
    ):
        self.matcher = matcher or FuzzyMatcher()
        self.min_name_length = (
            min_name_length
            if min_name_length is not None
            else reconciliation_settings.MIN_NAME_LENGTH
        )

    def reconcile(
        self,
        commands: Sequence[ExtractedCommand],
        stopped_names: Sequence[str],
        existing: Sequence[MedicationRecord],
        metadata: ReconciliationMetadata,
    ) -> ReconciliationResult:
        run = _ReconciliationRun(list(existing), metadata)

        logger.debug(
            f"Reconciling: {len(commands)} commands, {len(existing)} existing, "
            f"{len(stopped_names)} to stop"
        )

        for stop_name in stopped_names:
            self._apply_stop(run, stop_name)

        for command in commands:
            if command.action == MedicationAction.STOP:
                continue
            self._apply_command(run, command)

        result = run.to_result()
        logger.info(
            f"Reconciliation complete: added={len(result.added)} "
            f"updated={len(result.updated)} stopped={len(result.stopped)} "
            f"unchanged={len(result.unchanged)} warnings={len(result.errors)}"
        )
        return result

    # ------------------------------------------------------------------
    # Step 1: stops
    # ------------------------------------------------------------------

    def _apply_stop(self, run: "_ReconciliationRun", stop_name: str):
        normalized = normalize_drug_name(stop_name)
        matches = self.matcher.find_all_matches(normalized, run.working)

        if not matches:
            message = f'Cannot stop "{stop_name}": not found in active medications'
            run.errors.append(message)
            logger.warning(message)
            return

        target = self._most_recent(matches)
        index = run.index_of(target)
        run.working[index] = replace(
            target,
            is_active=False,
            stop_date=run.metadata.timestamp,
            stopped_by=run.metadata.actor,
            stopped_at=run.metadata.timestamp,
        )
        run.classify(index, STOPPED)

        if len(matches) > 1:
            message = (
                f'Ambiguous stop command for "{stop_name}" ({len(matches)} matches). '
                f'Stopped most recent: "{target.name}"'
            )
            run.errors.append(message)
            logger.warning(message)
        else:
            logger.debug(f"Stopped: {target.name}")

    @staticmethod
    def _most_recent(matches: List[MedicationRecord]) -> MedicationRecord:
        """Greatest added_at wins; missing timestamps sort oldest; ties keep list order."""
        best = matches[0]
        best_time = parse_timestamp(best.added_at) or _OLDEST
        for candidate in matches[1:]:
            candidate_time = parse_timestamp(candidate.added_at) or _OLDEST
            if candidate_time > best_time:
                best, best_time = candidate, candidate_time
        return best

    # ------------------------------------------------------------------
    # Step 2: adds, updates, continues
    # ------------------------------------------------------------------

    def _apply_command(self, run: "_ReconciliationRun", command: ExtractedCommand):
        name = normalize_drug_name(command.name)
        if len(name) < self.min_name_length:
            logger.debug(f"Dropping malformed command: {command.name!r}")
            return

        match = self.matcher.find_best_match(name, run.working)

        if match is None:
            record = MedicationRecord(
                name=name,
                dose=command.dose,
                route=command.route or None,
                frequency=command.frequency or None,
                is_active=True,
                start_date=run.metadata.timestamp,
                added_by=run.metadata.actor,
                added_at=run.metadata.timestamp,
            )
            run.working.append(record)
            run.classify(len(run.working) - 1, ADDED)
            logger.debug(f"Added: {name} {command.dose}")
            return

        index = run.index_of(match)

        if command.action == MedicationAction.CONTINUE:
            if run.status.get(index) is None:
                run.classify(index, UNCHANGED)
            logger.debug(f"Continuing: {match.name} (no changes)")
            return

        changes = {"dose": command.dose}
        if command.route:
            changes["route"] = command.route
        if command.frequency:
            changes["frequency"] = command.frequency

        if run.status.get(index) == ADDED:
            # Mentioned again in the same note; the new record absorbs it
            run.working[index] = replace(match, **changes)
            logger.debug(f"Merged repeat mention into new record: {match.name}")
            return

        run.working[index] = replace(
            match,
            last_updated_by=run.metadata.actor,
            last_updated_at=run.metadata.timestamp,
            **changes,
        )
        run.classify(index, UPDATED)
        logger.debug(f"Updated: {match.name} ({changes})")


class _ReconciliationRun:
    """Working state of a single reconcile() call."""

    def __init__(self, working: List[MedicationRecord], metadata: ReconciliationMetadata):
        self.working = working
        self.metadata = metadata
        self.errors: List[str] = []
        self.status: Dict[int, str] = {}
        self.order: Dict[str, List[int]] = {ADDED: [], UPDATED: [], STOPPED: [], UNCHANGED: []}

    def index_of(self, record: MedicationRecord) -> int:
        for i, candidate in enumerate(self.working):
            if candidate is record:
                return i
        raise ValueError(f"Record not in working list: {record.name}")

    def classify(self, index: int, category: str):
        previous = self.status.get(index)
        if previous == category:
            return
        if previous is not None:
            self.order[previous].remove(index)
        self.status[index] = category
        self.order[category].append(index)

    def to_result(self) -> ReconciliationResult:
        for index in range(len(self.working)):
            if index not in self.status:
                self.classify(index, UNCHANGED)

        return ReconciliationResult(
            added=[self.working[i] for i in self.order[ADDED]],
            updated=[self.working[i] for i in self.order[UPDATED]],
            stopped=[self.working[i] for i in self.order[STOPPED]],
            unchanged=[self.working[i] for i in self.order[UNCHANGED]],
            errors=list(self.errors),
        )
