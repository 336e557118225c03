from __future__ import annotations

import logging
from typing import Any, Optional

from .client import SupabaseClient, build_client_from_env
from .colors import ColorAllocator
from .converter import DEFAULT_ROOT_LABEL, convert_to_treemap_data
from .exceptions import RemoteCallError, TreeStructureError
from .models import WaterBalanceQuery, WaterBalanceResponse, WaterBalanceTreeData

logger = logging.getLogger(__name__)


class WaterBalanceService:
    """
    Fetches water balance hierarchies through the ``waterBalance`` edge function.

    The remote envelope is parsed but not reshaped. ``success`` is passed
    through as reported unless ``require_success`` is set.
    """

    def __init__(self, client: SupabaseClient, require_success: bool = False) -> None:
        self.client = client
        self.require_success = require_success

    @property
    def function_name(self) -> str:
        return self.client.config.water_balance_function

    async def query_water_balance(self, query: WaterBalanceQuery) -> WaterBalanceResponse:
        try:
            result = await self.client.invoke_function(self.function_name, query.as_body())
        except RemoteCallError as exc:
            logger.error("水平衡查询失败: %s", exc)
            raise RemoteCallError(
                f"调用 {self.function_name} function 失败: {exc.message}",
                status_code=exc.status_code,
            ) from exc
        return self._parse(result)

    def _parse(self, result: Any) -> WaterBalanceResponse:
        if not isinstance(result, dict):
            logger.error("水平衡查询失败: unexpected response %r", result)
            raise RemoteCallError(
                f"调用 {self.function_name} function 失败: unexpected response {type(result).__name__}"
            )
        try:
            response = WaterBalanceResponse.from_payload(result)
        except TreeStructureError as exc:
            logger.error("水平衡查询失败: %s", exc)
            raise
        if self.require_success and not response.success:
            logger.error("水平衡查询失败: remote reported success=false")
            raise RemoteCallError(f"{self.function_name} function reported success=false")
        return response

    async def load_treemap(
        self,
        query: WaterBalanceQuery,
        allocator: Optional[ColorAllocator] = None,
        root_label: str = DEFAULT_ROOT_LABEL,
    ) -> WaterBalanceTreeData:
        response = await self.query_water_balance(query)
        return convert_to_treemap_data(response.data, allocator, root_label=root_label)


async def query_water_balance(
    query: WaterBalanceQuery,
    client: Optional[SupabaseClient] = None,
) -> WaterBalanceResponse:
    if client is not None:
        return await WaterBalanceService(client).query_water_balance(query)
    async with build_client_from_env() as owned_client:
        return await WaterBalanceService(owned_client).query_water_balance(query)
