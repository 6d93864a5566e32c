"""Shared Flask extensions used by the goguma and board blueprints."""

from flask_sqlalchemy import SQLAlchemy

# SQLAlchemy instance bound in app.create_app so blueprints/services can import `db`.
db = SQLAlchemy()
