"""Tests for the water balance query facade."""

import json
import logging

import httpx
import pytest

from water_balance.colors import PALETTE
from water_balance.exceptions import RemoteCallError, TreeStructureError, WaterBalanceError
from water_balance.models import WaterBalanceQuery
from water_balance.service import WaterBalanceService, query_water_balance

QUERY = WaterBalanceQuery(group_name="plant-1", stat_date="2024-05-01")

PAYLOAD = {
    "success": True,
    "data": [
        {
            "id": "1",
            "pid": None,
            "name": "总用水",
            "waterVolume": 100,
            "waterAmount": 50,
            "path": "总用水",
            "children": [
                {
                    "id": "2",
                    "pid": "1",
                    "name": "锅炉",
                    "waterVolume": 40,
                    "waterAmount": 20,
                    "path": "总用水/锅炉",
                    "children": [],
                }
            ],
        }
    ],
}


def _reply(payload, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload)

    return handler


def _nested_reply(depth):
    # Built as text so encoding does not hit the recursion limit first.
    opening = "".join(
        f'{{"id":"n{level}","name":"N{level}","waterVolume":1,"path":"p","children":[' for level in range(depth)
    )
    body = '{"success":true,"data":[' + opening + "]}" * depth + "]}"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body.encode(), headers={"content-type": "application/json"})

    return handler


class TestQueryWaterBalance:
    @pytest.mark.asyncio
    async def test_invokes_named_function(self, client_factory):
        """The query is posted to the waterBalance function as its body."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=PAYLOAD)

        async with client_factory(handler) as client:
            response = await WaterBalanceService(client).query_water_balance(QUERY)

        assert seen[0].url.path == "/functions/v1/waterBalance"
        assert json.loads(seen[0].content) == {"groupName": "plant-1", "statDate": "2024-05-01"}
        assert response.success is True
        root = response.data[0]
        assert root.name == "总用水"
        assert root.water_volume == 100.0
        assert root.children[0].path == "总用水/锅炉"

    @pytest.mark.asyncio
    async def test_remote_error_message_is_wrapped(self, client_factory, caplog):
        """Remote failures carry the original message and are logged."""
        async with client_factory(_reply({"error": "relation does not exist"}, status=500)) as client:
            with caplog.at_level(logging.ERROR, logger="water_balance.service"):
                with pytest.raises(RemoteCallError) as excinfo:
                    await WaterBalanceService(client).query_water_balance(QUERY)

        message = str(excinfo.value)
        assert "调用 waterBalance function 失败" in message
        assert "relation does not exist" in message
        assert excinfo.value.status_code == 500
        assert any("水平衡查询失败" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_success_flag_passed_through(self, client_factory):
        """success=false is returned untouched by default."""
        async with client_factory(_reply({"data": [], "success": False})) as client:
            response = await WaterBalanceService(client).query_water_balance(QUERY)

        assert response.success is False
        assert response.data == ()

    @pytest.mark.asyncio
    async def test_require_success_rejects_failed_envelope(self, client_factory):
        """With require_success the flag is enforced locally."""
        async with client_factory(_reply({"data": [], "success": False})) as client:
            with pytest.raises(RemoteCallError, match="success=false"):
                await WaterBalanceService(client, require_success=True).query_water_balance(QUERY)

    @pytest.mark.asyncio
    async def test_non_object_response_rejected(self, client_factory):
        """A reply that is not a JSON object cannot be parsed."""
        async with client_factory(_reply(["unexpected"])) as client:
            with pytest.raises(RemoteCallError, match="unexpected response list"):
                await WaterBalanceService(client).query_water_balance(QUERY)

    @pytest.mark.asyncio
    async def test_module_function_with_client(self, client_factory):
        """The free function delegates to the service."""
        async with client_factory(_reply(PAYLOAD)) as client:
            response = await query_water_balance(QUERY, client=client)

        assert [item.id for item in response.data] == ["1"]

    @pytest.mark.asyncio
    async def test_module_function_builds_client_from_env(self, monkeypatch):
        """Without a client, one is created from the environment and closed."""
        created = []

        def fake_build():
            from water_balance.client import SupabaseClient
            from water_balance.config import SupabaseConfig

            client = SupabaseClient(
                SupabaseConfig(url="https://demo.supabase.co", anon_key="anon"),
                transport=httpx.MockTransport(_reply(PAYLOAD)),
            )
            created.append(client)
            return client

        monkeypatch.setattr("water_balance.service.build_client_from_env", fake_build)

        response = await query_water_balance(QUERY)

        assert response.success is True
        assert created[0]._client is None


class TestLoadTreemap:
    @pytest.mark.asyncio
    async def test_query_then_convert(self, client_factory):
        """load_treemap returns chart-ready data for the query."""
        async with client_factory(_reply(PAYLOAD)) as client:
            tree = await WaterBalanceService(client).load_treemap(QUERY)

        assert tree.as_dict() == {
            "name": "总用水",
            "children": [
                {
                    "name": "总用水",
                    "value": 100.0,
                    "path": "总用水",
                    "itemStyle": {"color": PALETTE[0]},
                    "children": [
                        {
                            "name": "锅炉",
                            "value": 40.0,
                            "path": "总用水/锅炉",
                            "itemStyle": {"color": PALETTE[1]},
                        }
                    ],
                }
            ],
        }

    @pytest.mark.asyncio
    async def test_integer_volumes_stay_exact(self, client_factory):
        """Integer waterVolume values reach the chart without float conversion."""
        async with client_factory(_reply(PAYLOAD)) as client:
            tree = await WaterBalanceService(client).load_treemap(QUERY)

        root = tree.children[0]
        assert isinstance(root.value, int)
        assert isinstance(root.children[0].value, int)


class TestDeeplyNestedPayload:
    @pytest.mark.asyncio
    async def test_six_hundred_levels_raise_library_error(self, client_factory, caplog):
        """A pathologically deep reply fails with a library error, never RecursionError."""
        async with client_factory(_nested_reply(600)) as client:
            with caplog.at_level(logging.ERROR, logger="water_balance.service"):
                with pytest.raises(WaterBalanceError) as excinfo:
                    await WaterBalanceService(client).query_water_balance(QUERY)

        assert isinstance(excinfo.value, (RemoteCallError, TreeStructureError))
        assert any("水平衡查询失败" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_depth_bound_applies_after_decoding(self, client_factory):
        """A reply that decodes but exceeds the item depth bound is rejected."""
        async with client_factory(_nested_reply(300)) as client:
            with pytest.raises(TreeStructureError, match="nested deeper than 256") as excinfo:
                await WaterBalanceService(client).query_water_balance(QUERY)

        assert len(excinfo.value.path) == 257
        assert excinfo.value.path[0] == "n0"

    @pytest.mark.asyncio
    async def test_non_object_item_rejected(self, client_factory):
        """Entries of data that are not objects raise TreeStructureError."""
        async with client_factory(_reply({"success": True, "data": ["oops"]})) as client:
            with pytest.raises(TreeStructureError, match="must be an object"):
                await WaterBalanceService(client).query_water_balance(QUERY)
