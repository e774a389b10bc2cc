"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Persisted storage keys
# ------------------------------------------------------------------

CONFIG_STORAGE_KEY = "sfm_cfg_v1"
SNAPSHOT_STORAGE_KEY = "sfm_db_v1"
LOG_LEVEL_STORAGE_KEY = "sfm_log_level"

SNAPSHOT_VERSION = 1

# ------------------------------------------------------------------
# Remote place collection (Supabase PostgREST)
# ------------------------------------------------------------------

SUPABASE_HOST_MARKER = ".supabase.co"
SUPABASE_ANON_KEY_PREFIX = "eyJ"
PLACES_PATH = "/rest/v1/places"

# ------------------------------------------------------------------
# AMap REST + hand-off
# ------------------------------------------------------------------

AMAP_GEOCODE_URL = "https://restapi.amap.com/v3/geocode/geo"
AMAP_DRIVING_URL = "https://restapi.amap.com/v3/direction/driving"
AMAP_WALKING_URL = "https://restapi.amap.com/v3/direction/walking"
AMAP_WEB_NAV_URL = "https://uri.amap.com/navigation"
AMAP_IOS_NAV_URL = "iosamap://navi"
AMAP_ANDROID_ROUTE_URL = "androidamap://route"
AMAP_SUCCESS_STATUS = "1"

SOURCE_APPLICATION = "street_food_map"
GEOCODE_DEFAULT_CITY = "Nationwide"

# ------------------------------------------------------------------
# Directory / view defaults
# ------------------------------------------------------------------

DEFAULT_CITY = "成都"
FILTER_DEBOUNCE_SECONDS = 0.12
SURFACE_MESSAGE_LIMIT = 200
