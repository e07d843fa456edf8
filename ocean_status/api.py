"""HTTP API for the ocean status service."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .domain import AggregateResponse
from .forecast_service import OceanStatusError
from .regions import REGIONS, UnknownRegionError, get_region_config
from .status_manager import get_status_manager
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")

router = APIRouter()


class RegionSummary(BaseModel):
    """Public view of a configured region."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    display_name: str


@router.get(
    "/status",
    response_model=AggregateResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
)
def get_status(response: Response, region: Optional[str] = Query(default=None)):
    """Return activity recommendations for a region, served from cache when fresh."""
    if region is None or not region.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required parameter: region")

    try:
        region_config = get_region_config(region)
    except UnknownRegionError as exc:
        logger.info("Rejected unknown region", extra={"region": region})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    try:
        payload, cache_hit = get_status_manager().get_ocean_status(region_config)
    except OceanStatusError as exc:
        logger.error("Status computation failed", extra={"region": region_config.id, "error": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch ocean status",
        ) from exc

    response.headers["X-Cache"] = "HIT" if cache_hit else "MISS"
    return payload


@router.get("/regions", response_model=List[RegionSummary], response_model_by_alias=True)
def list_regions():
    """List the supported regions by canonical id."""
    return [RegionSummary(id=r.id, name=r.name, display_name=r.display_name) for r in REGIONS]
