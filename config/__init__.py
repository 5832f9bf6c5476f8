"""
Configuration Module

Path layout (paths.py) and the explicit run configuration (pipeline_config.py)
"""
