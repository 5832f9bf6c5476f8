"""
Dataset Builders

Raw KSI extract -> cleaned pedestrian/cyclist table
"""
