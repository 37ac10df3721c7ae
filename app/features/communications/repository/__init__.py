"""
Neo4j repositories for the communications feature.
"""
