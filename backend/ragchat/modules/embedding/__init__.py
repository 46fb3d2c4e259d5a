"""Embedding storage and the embedding backfill pipeline."""
