"""
HTTP routers for the communications feature.
"""
