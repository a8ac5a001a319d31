"""Domain Layer: records, catalog models, error taxonomy and ports."""
