"""
Water balance report client.

Signs users in against the hosted Supabase project, fetches the water balance
hierarchy through the ``waterBalance`` edge function and reshapes it into the
tree consumed by the treemap chart.
"""

from .auth import AuthService  # noqa: F401
from .client import SupabaseClient, build_client_from_env  # noqa: F401
from .colors import PALETTE, ColorAllocator, default_allocator, next_color, reset_color_index  # noqa: F401
from .config import SupabaseConfig, load_supabase_config  # noqa: F401
from .converter import (  # noqa: F401
    DEFAULT_MAX_DEPTH,
    DEFAULT_ROOT_LABEL,
    TreemapConverter,
    convert_to_treemap_data,
)
from .debug import debug_treemap_data, format_treemap_data  # noqa: F401
from .exceptions import (  # noqa: F401
    AuthenticationError,
    ConfigurationError,
    RemoteCallError,
    TreeStructureError,
    WaterBalanceError,
)
from .models import (  # noqa: F401
    AuthUser,
    LoginCredentials,
    LoginResult,
    UserProfile,
    WaterBalanceItem,
    WaterBalanceQuery,
    WaterBalanceResponse,
    WaterBalanceTreeData,
    WaterBalanceTreeNode,
)
from .service import WaterBalanceService, query_water_balance  # noqa: F401
