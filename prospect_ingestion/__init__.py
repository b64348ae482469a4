"""
prospect_ingestion -- Bulk company and contact import.

Reads delimited text, maps columns to catalog fields, validates rows,
links contacts to their companies (creating missing ones), tags
visibility, commits the batch and reports per-row outcomes.

Architecture:
    prospect_ingestion/ is a top-level package. prospect_kernel and
    prospect_config never import from it.
"""
