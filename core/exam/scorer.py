#!/usr/bin/env python3
"""
Exam Scoring Engine - competency and environment profile from raw answers.

Every derived value uses the same majority rule: a group of answers scores 1
when at least two of them are 1, otherwise 0.

Question ids are routed by their first character:
- '1'-'4': job-branch questions
- '5': environment questions
- anything else: dropped (logged, not fatal)
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.exam.catalog import DEFAULT_CATALOG, ExamCatalog
from core.exam.models import (
    CompetencyBranch,
    EnvironmentSlot,
    ExamScoreResult,
    ReferenceMapping,
    ScoringDiagnostics,
)

logger = logging.getLogger(__name__)

BRANCH_PREFIXES = frozenset("1234")
ENVIRONMENT_PREFIX = "5"
MAJORITY_THRESHOLD = 2


def coerce_answer(value: Any) -> int:
    """
    Return 1 if the answer counts as affirmative, else 0.

    Numbers and numeric strings equal to 1 count, so 1, 1.0, "1" and "1.0"
    are all affirmative.
    """
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return 1 if value == 1 else 0
    try:
        return 1 if float(str(value).strip()) == 1 else 0
    except (TypeError, ValueError):
        return 0


def majority_value(values: Iterable[Any]) -> int:
    """1 if at least two values are affirmative, else 0. Order-invariant."""
    ones = sum(coerce_answer(v) for v in values)
    return 1 if ones >= MAJORITY_THRESHOLD else 0


def partition_answers(
    answers: Mapping[Any, Any]
) -> Tuple[Dict[str, Any], Dict[str, Any], List[str]]:
    """
    Split answers into branch and environment groups.

    Returns:
        (branch_answers, environment_answers, dropped_question_ids)
    """
    branch_answers: Dict[str, Any] = {}
    environment_answers: Dict[str, Any] = {}
    dropped: List[str] = []

    for raw_id, value in answers.items():
        question_id = str(raw_id).strip()
        prefix = question_id[:1]

        if prefix in BRANCH_PREFIXES:
            branch_answers[question_id] = value
        elif prefix == ENVIRONMENT_PREFIX:
            environment_answers[question_id] = value
        else:
            dropped.append(question_id)

    if dropped:
        logger.warning(f"Dropped {len(dropped)} answers with unknown question prefix: {dropped[:10]}")

    return branch_answers, environment_answers, dropped


def _group_by_reference(
    answers: Mapping[str, Any],
    mapping: ReferenceMapping,
    unmapped: List[str]
) -> Dict[str, Dict[str, List[Any]]]:
    """reference -> title -> answer values, recording ids missing from the mapping."""
    grouped: Dict[str, Dict[str, List[Any]]] = defaultdict(lambda: defaultdict(list))

    for question_id, value in answers.items():
        entry = mapping.get(question_id)
        if entry is None:
            unmapped.append(question_id)
            continue
        grouped[entry.reference][entry.title].append(value)

    return grouped


def score_branches(
    branch_answers: Mapping[str, Any],
    mapping: ReferenceMapping,
    catalog: ExamCatalog = DEFAULT_CATALOG,
    diagnostics: Optional[ScoringDiagnostics] = None
) -> List[CompetencyBranch]:
    """
    Score every catalog branch as a fixed-length competency vector.

    For each title in the mapping's recorded order for the branch reference,
    the competency is the majority value of that title's answers (0 when the
    title has no answers). The vector is padded with 0 or truncated to
    catalog.competencies_per_branch entries.
    """
    unmapped = diagnostics.unmapped_question_ids if diagnostics is not None else []
    grouped = _group_by_reference(branch_answers, mapping, unmapped)
    size = catalog.competencies_per_branch

    branches = []
    for branch in catalog.branches:
        by_title = grouped.get(branch.reference, {})
        competencies = [
            majority_value(by_title.get(title, []))
            for title in mapping.titles_for(branch.reference)[:size]
        ]
        competencies.extend([0] * (size - len(competencies)))
        branches.append(CompetencyBranch(job_type=branch.label, competencies=competencies))

    return branches


def score_environment(
    environment_answers: Mapping[str, Any],
    mapping: ReferenceMapping,
    catalog: ExamCatalog = DEFAULT_CATALOG,
    diagnostics: Optional[ScoringDiagnostics] = None
) -> List[EnvironmentSlot]:
    """
    Score each environment reference as a single slot.

    All answers mapped to the reference count together regardless of title.
    Slots are numbered 1..N in catalog order.
    """
    unmapped = diagnostics.unmapped_question_ids if diagnostics is not None else []
    grouped = _group_by_reference(environment_answers, mapping, unmapped)

    slots = []
    for index, reference in enumerate(catalog.environment_references, start=1):
        values = [v for title_values in grouped.get(reference, {}).values() for v in title_values]
        slots.append(EnvironmentSlot(question=index, selected_option=majority_value(values)))

    return slots


def score_exam(
    answers: Mapping[Any, Any],
    mapping: ReferenceMapping,
    job_title: Optional[str] = None,
    industry: Optional[str] = None,
    seniority: Optional[str] = None,
    catalog: ExamCatalog = DEFAULT_CATALOG
) -> Tuple[ExamScoreResult, ScoringDiagnostics]:
    """Score a full answer set. Pure: equal inputs give equal results."""
    diagnostics = ScoringDiagnostics()

    branch_answers, environment_answers, dropped = partition_answers(answers)
    diagnostics.dropped_question_ids.extend(dropped)

    branches = score_branches(branch_answers, mapping, catalog, diagnostics)
    environment = score_environment(environment_answers, mapping, catalog, diagnostics)

    if diagnostics.unmapped_question_ids:
        logger.warning(
            f"{len(diagnostics.unmapped_question_ids)} answered questions not found in mapping: "
            f"{diagnostics.unmapped_question_ids[:10]}"
        )

    result = ExamScoreResult(
        job_title=job_title,
        industry=industry,
        seniority=seniority,
        selected_branches=branches,
        environment_status=environment,
    )
    return result, diagnostics
