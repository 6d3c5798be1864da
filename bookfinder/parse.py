"""Parse Open Library search responses."""
from typing import Dict, Any, List, Optional, Tuple
import logging

from bookfinder.models import CatalogRecord

logger = logging.getLogger(__name__)


def parse_record(doc: Dict[str, Any]) -> Optional[CatalogRecord]:
    """
    Parse a single doc from an Open Library search response.

    Args:
        doc: Single entry of the ``docs`` list

    Returns:
        CatalogRecord or None if the doc is not an object
    """
    if not isinstance(doc, dict):
        # Log but don't crash - APIs can be unpredictable
        logger.warning(f"Skipping malformed doc: {doc!r}")
        return None
    return CatalogRecord.from_doc(doc)


def parse_search_response(response_json: Dict[str, Any]) -> Tuple[List[CatalogRecord], int]:
    """
    Parse a full search response.

    Args:
        response_json: Complete API response JSON

    Returns:
        (records, numFound); an absent or invalid count is 0
    """
    if not isinstance(response_json, dict):
        return [], 0

    docs = response_json.get("docs") or []
    if not isinstance(docs, list):
        docs = []

    records = []
    for doc in docs:
        record = parse_record(doc)
        if record:
            records.append(record)

    num_found = response_json.get("numFound") or 0
    if not isinstance(num_found, int) or isinstance(num_found, bool):
        num_found = 0

    return records, num_found
