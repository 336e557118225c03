from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from .client import SupabaseClient, build_client_from_env
from .converter import DEFAULT_ROOT_LABEL
from .exceptions import ConfigurationError, RemoteCallError, TreeStructureError
from .models import WaterBalanceQuery
from .service import WaterBalanceService

logger = logging.getLogger(__name__)

app = FastAPI(title="Water Balance API", version="0.1.0")


class WaterBalanceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group_name: str = Field(..., alias="groupName", min_length=1)
    stat_date: str = Field(..., alias="statDate", min_length=1)
    root_label: Optional[str] = Field(default=None, alias="rootLabel")

    def to_query(self) -> WaterBalanceQuery:
        return WaterBalanceQuery(group_name=self.group_name, stat_date=self.stat_date)


async def get_client() -> AsyncIterator[SupabaseClient]:
    try:
        client = build_client_from_env()
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    try:
        yield client
    finally:
        await client.aclose()


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/water-balance")
async def water_balance_endpoint(
    request: WaterBalanceRequest,
    client: SupabaseClient = Depends(get_client),
) -> Dict[str, Any]:
    service = WaterBalanceService(client, require_success=client.config.require_success)
    try:
        response = await service.query_water_balance(request.to_query())
    except RemoteCallError as exc:
        raise HTTPException(status_code=502, detail=exc.message)
    except TreeStructureError as exc:
        logger.warning("Rejected malformed water balance payload: %s (path=%s)", exc, "/".join(exc.path))
        raise HTTPException(status_code=502, detail=str(exc))
    return response.as_dict()


@app.post("/water-balance/treemap")
async def treemap_endpoint(
    request: WaterBalanceRequest,
    client: SupabaseClient = Depends(get_client),
) -> Dict[str, Any]:
    service = WaterBalanceService(client, require_success=client.config.require_success)
    try:
        tree = await service.load_treemap(request.to_query(), root_label=request.root_label or DEFAULT_ROOT_LABEL)
    except RemoteCallError as exc:
        raise HTTPException(status_code=502, detail=exc.message)
    except TreeStructureError as exc:
        logger.warning("Rejected malformed water balance tree: %s (path=%s)", exc, "/".join(exc.path))
        raise HTTPException(status_code=502, detail=str(exc))
    return tree.as_dict()
