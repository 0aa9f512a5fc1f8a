"""
Process-wide plumbing: the asyncpg pool, environment settings and log
setup. Nothing in here knows what an album is.
"""
