"""Visibility Analytics Engine.

Pure functions over already-fetched run history:
  1. Mention Sanitizer        — allow-list filter + sentiment normalization
  2. Run Aggregator           — per-query histories across runs
  3. Dashboard Summary        — share of voice, trend, gaps, actions, sentiment
  4. Query Performance        — cross-run statistics per query
  5. Query Trends             — single-query drill-down and trend direction
  6. Query Suggestions        — untracked queries worth tracking
  7. Snapshot Builder         — rows + per-run snapshot from LLM answers

Input:  AnalysisRun / QueryResult / ProjectSnapshot collections
Output: pydantic read models from brand_visibility.schemas
"""
