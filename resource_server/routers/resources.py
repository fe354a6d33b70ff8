from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from resource_server.introspection import TokenIntrospection
from resource_server.schemas.token import ErrorOut, TokenInfoOut
from resource_server.security.decorators import require_entitlements, require_scopes
from resource_server.security.dependencies import get_token

_ERRORS = {
    400: {"model": ErrorOut},
    401: {"model": ErrorOut},
    403: {"model": ErrorOut},
    500: {"model": ErrorOut},
}

router = APIRouter(prefix="/resources", tags=["resources"], responses=_ERRORS)


@router.get("/me", response_model=TokenInfoOut)
def who_am_i(token: TokenIntrospection = Depends(get_token)) -> dict[str, Any]:
    # Rule in security_config.yaml: token required, no particular scope.
    return token.to_dict()


@router.get("")
def list_resources(token: TokenIntrospection = Depends(get_token)) -> dict[str, Any]:
    # Rule in security_config.yaml: scope "read" or "write".
    return {"owner": token.resource_owner_id, "items": []}


@router.post("")
@require_scopes(["write"])
def create_resource(token: TokenIntrospection = Depends(get_token)) -> dict[str, Any]:
    # No config entry required: the decorator provides the rule, enforced globally.
    return {"owner": token.resource_owner_id, "created": True}


@router.delete("/{resource_id}")
def delete_resource(resource_id: str, token: TokenIntrospection = Depends(get_token)) -> dict[str, Any]:
    # Checked in the handler; failure is rendered by the VerificationError handler.
    token.require_scope("delete")
    return {"id": resource_id, "deleted": True}


@router.get("/reports")
@require_entitlements(["reports", "admin"])
def reports(token: TokenIntrospection = Depends(get_token)) -> dict[str, Any]:
    return {"entitlements": sorted(token.entitlements)}


@router.get("/reports/export")
def export_reports(token: TokenIntrospection = Depends(get_token)) -> dict[str, Any]:
    token.require_entitlement("export")
    return {"exported": True}
