"""Database layer: models, schemas, repositories and session management."""
