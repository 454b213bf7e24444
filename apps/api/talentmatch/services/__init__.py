"""Business logic: candidate ingestion and search."""
