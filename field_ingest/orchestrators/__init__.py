"""Orchestration of the ingestion activities.

- field_area: Run both estimators on one request and combine results
"""
