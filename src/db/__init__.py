"""
Database Module - Async SQLAlchemy persistence.

Components:
- database: lazy async engine, session scope, init_db
- models: ORM tables
- repositories: State Store implementations
"""
