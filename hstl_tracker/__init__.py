"""HSTL Recruitment Tracker"""

__version__ = "1.0.0"
