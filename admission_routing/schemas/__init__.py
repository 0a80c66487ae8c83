"""Pydantic schemas package – re-exports for convenience."""

# Lead schemas
from admission_routing.schemas.lead import (
    LeadCreate as LeadCreate,
    LeadSubmission as LeadSubmission,
    LeadOut as LeadOut,
    LeadSubmitResponse as LeadSubmitResponse,
)

# Agent schemas
from admission_routing.schemas.agent import (
    RoutedAgentOut as RoutedAgentOut,
    NextAgentResponse as NextAgentResponse,
)

# Bulk upload schemas
from admission_routing.schemas.bulk import (
    BulkUploadRequest as BulkUploadRequest,
    BulkUploadStats as BulkUploadStats,
    BulkRowError as BulkRowError,
    BulkUploadResponse as BulkUploadResponse,
)
