"""Pydantic schemas for schema-gate input and output."""
