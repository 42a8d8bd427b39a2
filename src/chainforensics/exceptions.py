# src/chainforensics/exceptions.py

class ForensicsError(Exception):
    """Base exception class for forensics analytics errors"""
    pass

class ConfigurationError(ForensicsError):
    """Raised when analyzer configuration is invalid"""
    pass

class SnapshotError(ForensicsError):
    """Raised when a ledger snapshot cannot be read or built"""
    pass

class PreconditionError(SnapshotError):
    """Raised when a record references an entity missing from the snapshot"""
    pass

class AnalysisError(ForensicsError):
    """Raised when an unknown analysis is requested"""
    pass
