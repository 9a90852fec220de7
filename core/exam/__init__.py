"""
Exam scoring: reference mapping, majority-rule scorer and step service.
"""

from core.exam.catalog import BranchDefinition, ExamCatalog, DEFAULT_CATALOG, BRANCHES, ENVIRONMENT_REFERENCES
from core.exam.exceptions import (
    ExamProcessingError,
    NotFoundError,
    InvalidDataError,
    ConfigurationError,
    UpstreamError,
)
from core.exam.mapping import load_reference_mapping, get_reference_mapping, clear_mapping_cache
from core.exam.models import (
    MappingEntry,
    ReferenceMapping,
    CompetencyBranch,
    EnvironmentSlot,
    ExamScoreResult,
    ScoringDiagnostics,
)
from core.exam.scorer import (
    majority_value,
    partition_answers,
    score_branches,
    score_environment,
    score_exam,
)

__all__ = [
    'BranchDefinition',
    'ExamCatalog',
    'DEFAULT_CATALOG',
    'BRANCHES',
    'ENVIRONMENT_REFERENCES',
    'ExamProcessingError',
    'NotFoundError',
    'InvalidDataError',
    'ConfigurationError',
    'UpstreamError',
    'load_reference_mapping',
    'get_reference_mapping',
    'clear_mapping_cache',
    'MappingEntry',
    'ReferenceMapping',
    'CompetencyBranch',
    'EnvironmentSlot',
    'ExamScoreResult',
    'ScoringDiagnostics',
    'majority_value',
    'partition_answers',
    'score_branches',
    'score_environment',
    'score_exam',
]
