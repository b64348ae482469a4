"""
Prospect Kernel

Lowest layer of the prospect directory: typed errors, structured logging,
time abstraction, subscription tiers, and the company/contact data model.
Nothing in the kernel imports from prospect_config or prospect_ingestion.
"""

__version__ = "0.1.0"
