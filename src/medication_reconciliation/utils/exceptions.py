# ============================================================================
# src/medication_reconciliation/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the medication reconciliation engine.
"""


class MedicationReconciliationError(Exception):
    """Base exception for all medication reconciliation errors."""
    pass


class ConfigurationError(MedicationReconciliationError):
    """Invalid configuration."""
    pass


class ModelError(MedicationReconciliationError):
    """Error with the language model backend."""
    pass


class InferenceError(ModelError):
    """Error during model inference (transport, HTTP status, timeout)."""
    pass


class OracleFailure(ModelError):
    """
    Primary extraction oracle could not produce a usable result.

    Raised when the call fails or the response is structurally invalid.
    Callers recover by falling back to the regex extractor.
    """
    def __init__(self, message: str, reason: str = "error"):
        super().__init__(message)
        self.reason = reason


class CacheError(MedicationReconciliationError):
    """Error with caching system."""
    pass
