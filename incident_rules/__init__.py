"""
incident_rules: exploratory analysis of public incident data.

Loads and cleans incident records, buckets them by time of day, and mines
association rules between the time slot and the precinct.
"""
__version__ = "0.1.0"
