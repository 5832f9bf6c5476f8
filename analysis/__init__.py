"""
Analysis Module

Aggregation and reporting on the cleaned collision table

Modules:
- collision_summaries: Count tables (gold layer)
- reports: Report figures
"""

__version__ = "1.0.0"
