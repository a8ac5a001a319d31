"""Domain models: IGDB records and catalog/presentation structures."""
