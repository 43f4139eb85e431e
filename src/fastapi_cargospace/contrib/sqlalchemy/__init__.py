"""SQLAlchemy persistence backend."""
