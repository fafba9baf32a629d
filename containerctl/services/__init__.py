"""Service layer for containerctl."""
