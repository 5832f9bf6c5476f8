"""
Pipeline entry points (verification, orchestration)
"""
