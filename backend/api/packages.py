"""
backend/api/packages.py
Package CRUD, scoped to the authenticated owner.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from backend.core.auth import get_current_user_id
from backend.features.packages.service import (
    list_packages,
    create_package,
    update_package,
    delete_package,
)
from backend.models.package import PackageCreateRequest, PackageUpdateRequest

router = APIRouter()


@router.get("", response_model=Dict[str, Any])
def get_packages(user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    """List the caller's packages, newest first."""
    packages = list_packages(user_id)
    return {"packages": [p.model_dump(mode="json", by_alias=True) for p in packages]}


@router.post("", status_code=201, response_model=Dict[str, Any])
def post_package(body: PackageCreateRequest, user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    package = create_package(user_id, body)
    return {"package": package.model_dump(mode="json", by_alias=True)}


@router.put("/{package_id}", response_model=Dict[str, Any])
def put_package(
    package_id: str,
    body: PackageUpdateRequest,
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    package = update_package(user_id, package_id, body)
    return {"package": package.model_dump(mode="json", by_alias=True)}


@router.delete("/{package_id}", response_model=Dict[str, Any])
def remove_package(package_id: str, user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    """Delete a package. Existing bills keep their item snapshots."""
    delete_package(user_id, package_id)
    return {"deleted": True}
