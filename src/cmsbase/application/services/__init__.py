"""Application services orchestrating domain logic and persistence."""

from cmsbase.application.services.auth_gateway import AuthGateway
from cmsbase.application.services.crud_dispatcher import (
    CrudDispatcher,
    WritePayload,
    parse_ids,
    parse_page_param,
    parse_redaction_request,
)

__all__ = [
    "AuthGateway",
    "CrudDispatcher",
    "WritePayload",
    "parse_ids",
    "parse_page_param",
    "parse_redaction_request",
]
