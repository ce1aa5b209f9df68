"""
Finance Tracker - Source Package

A month-view personal finance tracker for recurring bills,
todos and paychecks.

DESIGN PRINCIPLES:
1. Templates generate instances; instances never feed back into templates
2. One occurrence can be changed without touching the series
3. No silent corrections: invalid input is a visible no-op
4. Every user action is auditable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
