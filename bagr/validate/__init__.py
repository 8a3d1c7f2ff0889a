"""
This module provides classes and functions for validating bags.
"""
from .base import (ALL, ERROR, WARN, REC, PROB, Validator, ValidationIssue,
                   ValidationResults, BagComplianceError)
from .bag import BagValidator, validate_bag
