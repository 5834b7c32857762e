"""Project-specific exception types for clearer error semantics."""

class ConfigError(ValueError):
    """Configuration validation errors."""
    pass

class ClassificationError(ValueError):
    """Benchmark identifier did not match any classification rule."""

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason

class RecordFormatError(ValueError):
    """JMH result entry is missing fields or carries unusable values."""
    pass

class DataIntegrityError(Exception):
    """Paired records disagree in a way strict matching refuses."""
    pass

class DuplicateProviderEntry(DataIntegrityError):
    pass

class UnitMismatch(DataIntegrityError):
    pass
