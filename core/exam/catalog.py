"""
Fixed branch and environment catalog.

The 16 job branches and 10 environment dimensions are scored in the order
declared here. Order only affects output ordering, never the values.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BranchDefinition:
    reference: str
    label: str


@dataclass(frozen=True)
class ExamCatalog:
    branches: Tuple[BranchDefinition, ...]
    environment_references: Tuple[str, ...]
    competencies_per_branch: int = 5


BRANCHES: Tuple[BranchDefinition, ...] = (
    BranchDefinition("R17", "Open Thinking Jobs"),
    BranchDefinition("R18", "Analytical Jobs"),
    BranchDefinition("R19", "Technical Jobs"),
    BranchDefinition("R20", "Creative Jobs"),
    BranchDefinition("R21", "Social Service Jobs"),
    BranchDefinition("R22", "Leadership Jobs"),
    BranchDefinition("R23", "Administrative Jobs"),
    BranchDefinition("R24", "Commercial Jobs"),
    BranchDefinition("R25", "Scientific Research Jobs"),
    BranchDefinition("R26", "Educational Jobs"),
    BranchDefinition("R27", "Health Care Jobs"),
    BranchDefinition("R28", "Field Operations Jobs"),
    BranchDefinition("R29", "Financial Jobs"),
    BranchDefinition("R30", "Media and Communication Jobs"),
    BranchDefinition("R31", "Legal Jobs"),
    BranchDefinition("R32", "Craft and Manual Jobs"),
)

ENVIRONMENT_REFERENCES: Tuple[str, ...] = (
    "R33", "R34", "R35", "R36", "R37",
    "R38", "R39", "R40", "R41", "R42",
)

DEFAULT_CATALOG = ExamCatalog(
    branches=BRANCHES,
    environment_references=ENVIRONMENT_REFERENCES,
)
