"""Parent resolution for dependent rows."""

from prospect_ingestion.resolver.context import ImportRunContext
from prospect_ingestion.resolver.resolver import EntityResolver

__all__ = ["EntityResolver", "ImportRunContext"]
