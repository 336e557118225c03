from __future__ import annotations

from typing import Callable, Optional, Sequence

import httpx
import pytest

from water_balance.client import SupabaseClient
from water_balance.config import SupabaseConfig
from water_balance.models import WaterBalanceItem

SUPABASE_URL = "https://demo.supabase.co"
ANON_KEY = "anon-key"


def make_item(
    item_id: str,
    volume: float = 1.0,
    children: Sequence[WaterBalanceItem] = (),
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> WaterBalanceItem:
    label = name or item_id.upper()
    return WaterBalanceItem(
        id=item_id,
        name=label,
        water_volume=volume,
        water_amount=volume * 2,
        path=path or label,
        children=tuple(children),
    )


@pytest.fixture
def supabase_config() -> SupabaseConfig:
    return SupabaseConfig(url=SUPABASE_URL, anon_key=ANON_KEY)


@pytest.fixture
def client_factory(supabase_config) -> Callable[[Callable[[httpx.Request], httpx.Response]], SupabaseClient]:
    """Build a SupabaseClient whose requests are answered by ``handler``."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> SupabaseClient:
        return SupabaseClient(supabase_config, transport=httpx.MockTransport(handler))

    return _factory
