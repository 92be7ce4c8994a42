"""Core HR module — the Employee model the leave engine reads."""

from leave_engine.core_hr.models import Employee

__all__ = ["Employee"]
