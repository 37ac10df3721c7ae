"""
Communications feature package.

This vertical slice keeps every layer of the conversation browser and the
cross-user communication analytics co-located: domain models and errors,
Neo4j repositories, services and API routers.

Nothing is re-exported here: app.db.neo4j imports the domain errors, so
pulling the routers in at package import time would be circular.
"""
