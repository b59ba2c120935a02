from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from firise.config import API_PREFIX
from firise.database import get_storage
from firise.errors import internal_error
from firise.schemas import Resource, ResourceType
from firise.services.storage import Storage

router = APIRouter(prefix=f"{API_PREFIX}/resources", tags=["Resources"])


@router.get("", response_model=list[Resource])
def list_resources(type: Optional[ResourceType] = None, storage: Storage = Depends(get_storage)):
    try:
        return storage.get_resources(type)
    except Exception:
        raise internal_error("listing resources")


@router.get("/{resource_id}", response_model=Resource)
def get_resource(resource_id: int, storage: Storage = Depends(get_storage)):
    try:
        resource = storage.get_resource(resource_id)
        if not resource:
            raise HTTPException(status_code=404, detail="Resource not found")
        return resource
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"reading resource {resource_id}")


@router.post("/{resource_id}/bookmark", response_model=Resource)
def toggle_bookmark(resource_id: int, storage: Storage = Depends(get_storage)):
    try:
        resource = storage.toggle_resource_bookmark(resource_id)
        if not resource:
            raise HTTPException(status_code=404, detail="Resource not found")
        return resource
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"toggling bookmark on resource {resource_id}")
