# backend/cadplan/__init__.py
# Floor plan generation and CAD export service

__version__ = "1.0.0"
