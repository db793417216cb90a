"""Neo4j query pipeline: statements, session-scoped execution, result normalization."""

from election_graph.graph.executor import QueryExecutor
from election_graph.graph.neo4j_client import GraphClient
from election_graph.graph.normalize import decode_int64, decode_value, normalize, normalize_all, normalize_first
from election_graph.graph.statement import Statement

__all__ = [
    "GraphClient",
    "QueryExecutor",
    "Statement",
    "decode_int64",
    "decode_value",
    "normalize",
    "normalize_all",
    "normalize_first",
]
