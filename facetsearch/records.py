"""Adapt raw search hits to fully populated document records."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_VALUE_RANGE_RE = re.compile(r"^(\d+(?:\.\d+)?)([KM]?)", re.IGNORECASE)

# Fields copied verbatim from the hit, defaulting to "" when absent.
_TEXT_FIELDS = [
    "Client_Name",
    "Client_Type",
    "Client_Contact",
    "Client_Contact_Title",
    "Client_Journey",
    "Document_Type",
    "Document_Sub_Type",
    "Document_Value_Range",
    "Document_Outcome",
    "Last_Stage_Change_Date",
    "Industry",
    "Sub_Industry",
    "Service",
    "Sub_Service",
    "Business_Unit",
    "Region",
    "Country",
    "State",
    "City",
    "Author",
    "PIC",
    "PM",
    "Keywords",
    "Commercial_Program",
    "Competitors",
]
_NULLABLE_FIELDS = ["Project_Team", "SMEs", "Attachments", "Pursuit_Team"]


class DocumentRecord(BaseModel):
    id: int
    documentId: str
    unique_id: str = ""
    SF_Number: str = ""
    Client_Name: str = ""
    Client_Type: str = ""
    Client_Contact: str = ""
    Client_Contact_Title: str = ""
    Client_Journey: str = ""
    Document_Type: str = ""
    Document_Sub_Type: str = ""
    Document_Value_Range: str = ""
    Document_Outcome: str = ""
    Last_Stage_Change_Date: str = ""
    Industry: str = ""
    Sub_Industry: str = ""
    Service: str = ""
    Sub_Service: str = ""
    Business_Unit: str = ""
    Region: str = ""
    Country: str = ""
    State: str = ""
    City: str = ""
    Author: str = ""
    PIC: str = ""
    PM: str = ""
    Keywords: str = ""
    Commercial_Program: str = ""
    Competitors: str = ""
    Project_Team: Optional[Any] = None
    SMEs: Optional[Any] = None
    Attachments: Optional[Any] = None
    Pursuit_Team: Optional[Any] = None
    Description: List[Any] = []
    createdAt: str = ""
    updatedAt: str = ""
    publishedAt: str = ""
    documentUrl: str = ""
    value: float = 0
    proposalName: str = ""
    highlights: Dict[str, Any] = {}


class SearchResult(BaseModel):
    records: List[DocumentRecord] = []
    total: int = 0
    facet_distribution: Dict[str, Dict[str, int]] = {}
    processing_time_ms: int = 0
    query: str = ""
    scope: str = "global"
    page: int = 1


def parse_value_range(raw: Optional[str]) -> float:
    """``"50K"`` -> 50000, ``"2M+"`` -> 2000000; unparseable -> 0."""
    if not raw:
        return 0
    match = _VALUE_RANGE_RE.match(str(raw).strip())
    if not match:
        return 0
    value = float(match.group(1))
    suffix = match.group(2).upper()
    if suffix == "K":
        value *= 1000
    elif suffix == "M":
        value *= 1_000_000
    return value


def get_document_url(identifier: str) -> str:
    """Local preview file chosen from the identifier when the hit has no URL."""
    identifier = identifier or ""
    if "Excel" in identifier:
        return "/documents/test_excel.xlsx"
    if "Word" in identifier:
        return "/documents/test_word.docx"
    if "PPT" in identifier:
        return "/documents/test_ppt.pptx"
    return "/documents/test_pdf.pdf"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _coerce_id(raw: Any, fallback: int) -> int:
    if isinstance(raw, bool):
        return fallback
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw))
    except (TypeError, ValueError):
        return fallback


def adapt_hit(hit: Dict[str, Any], position: int = 0) -> DocumentRecord:
    """
    Map one untyped engine hit to a DocumentRecord.

    Every field is defaulted so downstream code never sees a missing key:
    text fields become "", nested structures None or [], timestamps the
    current time, and ``value`` is parsed from ``Document_Value_Range``.
    """
    data = hit.get("attributes") or hit
    fallback_id = position + 1
    raw_id = data.get("id", hit.get("id"))
    if raw_id is None:
        raw_id = data.get("documentId")
    record_id = _coerce_id(raw_id, fallback_id)
    document_id = _text(data.get("documentId") or record_id)

    unique_id = _text(
        data.get("unique_id") or data.get("Unique_Id") or data.get("SF_Number")
    )
    sf_number = _text(data.get("SF_Number") or unique_id)
    now = datetime.now(timezone.utc).isoformat()

    fields: Dict[str, Any] = {k: _text(data.get(k)) for k in _TEXT_FIELDS}
    fields.update({k: data.get(k) for k in _NULLABLE_FIELDS})

    description = data.get("Description")
    raw_value = data.get("value")
    if isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
        value = float(raw_value)
    else:
        value = parse_value_range(fields["Document_Value_Range"])

    document_url = _text(data.get("documentUrl") or data.get("url"))
    if not document_url:
        document_url = get_document_url(sf_number or unique_id)

    return DocumentRecord(
        id=record_id,
        documentId=document_id,
        unique_id=unique_id,
        SF_Number=sf_number,
        Description=description if isinstance(description, list) else [],
        createdAt=_text(data.get("createdAt")) or now,
        updatedAt=_text(data.get("updatedAt")) or now,
        publishedAt=_text(data.get("publishedAt")) or now,
        documentUrl=document_url,
        value=value,
        proposalName=_text(data.get("proposalName")) or sf_number or unique_id,
        highlights=hit.get("_formatted") or {},
        **fields,
    )


def adapt_response(
    payload: Dict[str, Any], query: str = "", scope: str = "global", page: int = 1
) -> SearchResult:
    records = []
    for position, hit in enumerate(payload.get("hits") or []):
        if not isinstance(hit, dict):
            logger.warning("Skipping malformed hit at position %d", position)
            continue
        records.append(adapt_hit(hit, position))
    return SearchResult(
        records=records,
        total=int(payload.get("estimatedTotalHits") or payload.get("totalHits") or 0),
        facet_distribution=payload.get("facetDistribution") or {},
        processing_time_ms=int(payload.get("processingTimeMs") or 0),
        query=payload.get("query", query) or "",
        scope=scope,
        page=page,
    )
