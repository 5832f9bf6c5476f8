"""
Shared utilities (schema validation)
"""
