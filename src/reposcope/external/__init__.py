"""External search tools: registry, searchers and the strategy orchestrator.

Modules are imported directly (``reposcope.external.smart_searcher`` etc.).
"""
