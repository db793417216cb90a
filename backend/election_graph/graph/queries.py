"""Cypher statement catalog for the election graph.

Graph projection, pipeline and model names are contracts with the GDS jobs
that train models and maintain the graph out of band; they must match the
names those jobs create.
"""

from election_graph.graph.statement import Statement

# GDS catalog names
PREDICTION_GRAPH = "fullGraph"
PREDICTION_MODEL = "model-candidate"
PREDICTION_TOP_N = 20
DEGREE_GRAPH = "candidateElectionGraph"
BETWEENNESS_GRAPH = "betweenGraph"
COMPONENTS_GRAPH = "componentsGraph"
WCC_LIMIT = 10


def election_votes(election_type: str) -> Statement:
    """Total candidate votes per year and party for one election type."""
    cypher = """
    MATCH (e:Election {type: $type})
    MATCH (c:Candidate)-[r:PARTICIPATED_IN]->(e)
    RETURN e.year AS year, r.party AS party, sum(r.candidatevotes) AS candidate_votes
    ORDER BY year, party
    """
    return Statement(cypher, {"type": election_type})


def candidate_predictions() -> Statement:
    """Stream the top predicted candidate pairs from the trained pipeline model."""
    cypher = """
    CALL gds.beta.pipeline.linkPrediction.predict.stream(
        $graphName, {modelName: $modelName, topN: $topN}
    )
    YIELD node1, node2, probability
    RETURN gds.util.asNode(node1).name AS candidate1,
           gds.util.asNode(node2).name AS candidate2,
           probability
    ORDER BY probability DESC, candidate1
    """
    return Statement(
        cypher,
        {"graphName": PREDICTION_GRAPH, "modelName": PREDICTION_MODEL, "topN": PREDICTION_TOP_N},
    )


def drop_projection_if_exists(graph_name: str) -> Statement:
    """Drop a projection without failing when it is absent."""
    cypher = """
    CALL gds.graph.drop($graphName, false)
    YIELD graphName
    RETURN graphName
    """
    return Statement(cypher, {"graphName": graph_name})


def drop_projection(graph_name: str) -> Statement:
    """Drop a projection; the database raises when it does not exist."""
    return Statement("CALL gds.graph.drop($projection)", {"projection": graph_name})


def degree_centrality() -> list[Statement]:
    """
    (Re)project candidates and elections, then stream degree centrality.

    Returns:
        Batch of [drop-if-exists, project, stream]; the stream reads the
        projection created by the previous statement in the same session.
    """
    project = Statement(
        """
        CALL gds.graph.project($graphName, $nodeLabels, $relationshipTypes)
        YIELD graphName, nodeCount, relationshipCount
        RETURN graphName, nodeCount, relationshipCount
        """,
        {
            "graphName": DEGREE_GRAPH,
            "nodeLabels": ["Candidate", "Election"],
            "relationshipTypes": ["PARTICIPATED_IN"],
        },
    )
    stream = Statement(
        """
        CALL gds.degree.stream($graphName)
        YIELD nodeId, score
        WITH gds.util.asNode(nodeId).name AS name, score
        WHERE name IS NOT NULL
        RETURN name, score
        ORDER BY score DESC, name
        """,
        {"graphName": DEGREE_GRAPH},
    )
    return [drop_projection_if_exists(DEGREE_GRAPH), project, stream]


def betweenness_centrality() -> list[Statement]:
    """(Re)project the candidate co-participation graph, then stream betweenness > 0."""
    project = Statement(
        """
        CALL gds.graph.project($graphName, $nodeLabel, $relationshipType)
        YIELD graphName, nodeCount, relationshipCount
        RETURN graphName, nodeCount, relationshipCount
        """,
        {
            "graphName": BETWEENNESS_GRAPH,
            "nodeLabel": "Candidate",
            "relationshipType": "PARTICIPATED_TOGETHER",
        },
    )
    stream = Statement(
        """
        CALL gds.betweenness.stream($graphName)
        YIELD nodeId, score
        WHERE score > 0
        RETURN gds.util.asNode(nodeId).name AS name, score
        ORDER BY score DESC, name
        """,
        {"graphName": BETWEENNESS_GRAPH},
    )
    return [drop_projection_if_exists(BETWEENNESS_GRAPH), project, stream]


def project_components_graph() -> list[Statement]:
    """(Re)project candidates over undirected co-participation edges for WCC."""
    project = Statement(
        """
        CALL gds.graph.project(
            $graphName,
            'Candidate',
            {PARTICIPATED_TOGETHER: {orientation: 'UNDIRECTED'}}
        )
        YIELD graphName, nodeCount, relationshipCount
        RETURN graphName, nodeCount, relationshipCount
        """,
        {"graphName": COMPONENTS_GRAPH},
    )
    return [drop_projection_if_exists(COMPONENTS_GRAPH), project]


def wcc_components() -> Statement:
    """Stream weakly connected components from the components projection."""
    cypher = """
    CALL gds.wcc.stream($graphName)
    YIELD nodeId, componentId
    RETURN gds.util.asNode(nodeId).name AS Candidate, componentId AS ComponentId
    ORDER BY ComponentId, Candidate
    LIMIT $limit
    """
    return Statement(cypher, {"graphName": COMPONENTS_GRAPH, "limit": WCC_LIMIT})


def node_count_by_label() -> Statement:
    cypher = """
    MATCH (n)
    RETURN labels(n) AS NodeType, count(n) AS TotalCount
    ORDER BY TotalCount DESC
    """
    return Statement(cypher)


def total_nodes() -> Statement:
    return Statement("MATCH (n) RETURN count(n) AS totalNodes")


def total_relationships() -> Statement:
    return Statement("MATCH ()-[r]->() RETURN count(r) AS totalRelationships")


def isolated_nodes() -> Statement:
    return Statement("MATCH (n) WHERE NOT (n)--() RETURN count(n) AS isolatedNodes")
