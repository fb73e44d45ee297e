"""
Retrieval-budgeting engine for question answering over sermon transcripts.

Entry point: ``transcript_search.pipeline.orchestrator.build_context``.
"""

__version__ = "0.1.0"
