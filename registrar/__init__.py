"""
Registrar: grading, academic standing and prerequisite services for an
academic institution.

Converts weighted assessment scores into percentages, letter grades and
GPA, classifies academic standing, and checks course prerequisites for
enrollment eligibility.
"""

__version__ = "1.0.0"
__author__ = "Registrar Development Team"
__description__ = "Grading, academic standing and prerequisite services"
