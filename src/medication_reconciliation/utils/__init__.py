# ============================================================================
# src/medication_reconciliation/utils/__init__.py
# ============================================================================
"""
Utility modules for the medication reconciliation engine.
"""

from .exceptions import (
    MedicationReconciliationError,
    ConfigurationError,
    ModelError,
    InferenceError,
    OracleFailure,
    CacheError,
)

from .logging import (
    setup_logging,
    JsonFormatter,
    log_performance,
)

from .drug_name_normalizer import (
    normalize_drug_name,
    names_equivalent,
)

__all__ = [
    # Exceptions
    'MedicationReconciliationError',
    'ConfigurationError',
    'ModelError',
    'InferenceError',
    'OracleFailure',
    'CacheError',
    # Logging
    'setup_logging',
    'JsonFormatter',
    'log_performance',
    # Normalization
    'normalize_drug_name',
    'names_equivalent',
]
