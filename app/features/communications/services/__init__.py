"""
Service layer for the communications feature.
"""
