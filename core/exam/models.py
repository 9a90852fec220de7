#!/usr/bin/env python3
"""
Exam scoring models - reference mapping and scored profile structures.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Sequence, Tuple


@dataclass(frozen=True)
class MappingEntry:
    """One answerable question in the reference table."""
    title: str
    reference: str


@dataclass
class ReferenceMapping:
    """
    Question lookup built from the reference table.

    entries: question id -> MappingEntry
    title_order: reference code -> distinct titles in first-seen order

    A loaded mapping is shared by every job in the process; freeze() turns
    the title lists into tuples once loading is done.
    """
    entries: Dict[str, MappingEntry] = field(default_factory=dict)
    title_order: Dict[str, Sequence[str]] = field(default_factory=dict)

    def get(self, question_id: str) -> Optional[MappingEntry]:
        return self.entries.get(question_id)

    def titles_for(self, reference: str) -> Tuple[str, ...]:
        return tuple(self.title_order.get(reference, ()))

    def freeze(self) -> "ReferenceMapping":
        self.title_order = {ref: tuple(titles) for ref, titles in self.title_order.items()}
        return self

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class CompetencyBranch:
    job_type: str
    competencies: List[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_type": self.job_type,
            "chosen_competencies": list(self.competencies),
        }


@dataclass(frozen=True)
class EnvironmentSlot:
    question: int
    selected_option: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "selected_option": self.selected_option,
        }


@dataclass(frozen=True)
class ExamScoreResult:
    """Scored profile sent to the recommendation API."""
    job_title: Optional[str]
    industry: Optional[str]
    seniority: Optional[str]
    selected_branches: List[CompetencyBranch]
    environment_status: List[EnvironmentSlot]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "job_title": self.job_title,
            "industry": self.industry,
            "seniority": self.seniority,
            "selected_branches": [b.to_dict() for b in self.selected_branches],
            "environment_status": [s.to_dict() for s in self.environment_status],
        }


@dataclass
class ScoringDiagnostics:
    """Non-fatal anomalies seen while scoring."""
    dropped_question_ids: List[str] = field(default_factory=list)
    unmapped_question_ids: List[str] = field(default_factory=list)

    @property
    def anomaly_count(self) -> int:
        return len(self.dropped_question_ids) + len(self.unmapped_question_ids)
