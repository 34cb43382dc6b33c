"""Store module initialization"""
from .recruitment_store import RecruitmentStore

__all__ = ["RecruitmentStore"]
