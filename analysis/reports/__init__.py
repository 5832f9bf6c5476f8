"""
Report figure generation
"""
