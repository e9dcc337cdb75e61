"""Celery application and task entry points."""
