"""
FPA Core

Function Point Analysis calculation core: component validation, IFPUG
complexity classification, adjusted function points, team sizing and
trend analysis across estimate versions.
"""

__version__ = "1.0.0"
__author__ = "FPA Core Team"
