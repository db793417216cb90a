"""HTTP gateway for election graph analytics on Neo4j GDS."""

__version__ = "1.0.0"
