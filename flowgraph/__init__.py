"""
Flowgraph API

A GraphQL and REST API over a read-only, in-memory conversational flow graph.
Provides filtered, paginated and relation-joined views with JWT role auth.
"""

__version__ = "1.0.0"
__author__ = "Flowgraph Team"
