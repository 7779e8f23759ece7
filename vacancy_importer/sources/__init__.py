"""Vacancy source adapters, one per recruitment vendor."""

from .base import VacancySource
from .emply import EmplySource
from .hrmanager import HrManagerSource

__all__ = ["EmplySource", "HrManagerSource", "VacancySource"]
