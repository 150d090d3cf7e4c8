"""Internal constants shared across the library."""

BASE_URL = "http://localhost/habibbi-api"
USER_AGENT = "pyhabibbi"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_NOTIFICATION_DURATION_MS = 4000
DEFAULT_CASH_STATE_KEY = "cash_state"
DEFAULT_OPENING_FLOAT = 75000

# ------------------------------------------------------------------
# REST endpoints
# ------------------------------------------------------------------

CUSTOMERS_ENDPOINT = "/api/clientes"
SUPPLIERS_ENDPOINT = "/api/proveedores"
USERS_ENDPOINT = "/api/usuarios"
SALES_ENDPOINT = "/api/ventas"
HEALTH_ENDPOINT = "/api/health"

#: Query parameter carrying the cache-busting timestamp on list requests.
CACHE_BUST_PARAM = "_t"

# ------------------------------------------------------------------
# User roles accepted by the backend
# ------------------------------------------------------------------

USER_ROLES: frozenset[str] = frozenset({"admin", "vendedor"})
