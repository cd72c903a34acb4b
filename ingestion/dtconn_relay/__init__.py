"""
dtconn relay - Ingestion API

FastAPI service for receiving signed monitoring event notifications,
validating their signatures, and appending them to a BigQuery table.
"""

__version__ = "0.1.0"
