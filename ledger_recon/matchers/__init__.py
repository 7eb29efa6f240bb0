"""
Matcher implementations for client and employee resolution.
"""

from .base import (
    BaseMatcher,
    ClientMatch,
    ClientMatchType,
    EmployeeMatch,
    EmployeeMatchType,
)
from .client import ClientMatcher
from .employee import EmployeeMatcher

__all__ = [
    'BaseMatcher',
    'ClientMatch',
    'ClientMatchType',
    'EmployeeMatch',
    'EmployeeMatchType',
    'ClientMatcher',
    'EmployeeMatcher',
]
