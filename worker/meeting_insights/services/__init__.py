"""Parsing and reconciliation services.

JSON recovery and the category extractors turn freeform analysis into
canonical records; aggregate/reconcile assemble them into AnalysisResults.
"""
