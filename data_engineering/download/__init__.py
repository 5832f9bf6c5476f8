"""
Data Download Module

Cached acquisition of the raw Toronto KSI collision extract
(City of Toronto Open Data, CKAN API)
"""
