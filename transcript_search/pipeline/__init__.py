"""
Pipeline modules for the retrieval-budgeting engine.

Stage 1: Query understanding   (scope.py, query_expansion.py)
Stage 2: Retrieval             (retrieval.py, chunk_scorer.py)
Stage 3: Series expansion      (siblings.py)
Stage 4: Budget + assembly     (chunk_scorer.py, context_builder.py)

Orchestrated by: orchestrator.py
Offline corpus indexing: indexer.py
"""
