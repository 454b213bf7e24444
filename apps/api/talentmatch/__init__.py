"""Talent Match API: semantic candidate search and ingestion."""
