
MOVEMENT_IN = "IN"
MOVEMENT_OUT = "OUT"
MOVEMENT_ADJUSTMENT = "ADJUSTMENT"
MOVEMENT_TRANSFER = "TRANSFER"

OUT_OF_STOCK = "OUT_OF_STOCK"
CRITICAL_STOCK = "CRITICAL_STOCK"
LOW_STOCK = "LOW_STOCK"
IN_STOCK = "IN_STOCK"

CRITICAL_STOCK_THRESHOLD = 2
DEFAULT_MIN_STOCK = 5
MAX_MOVEMENT_QUANTITY = 999_999
MIN_ADJUSTMENT_REASON_LENGTH = 10
MAX_IMAGES_PER_PRODUCT = 10
MAX_TAGS_PER_PRODUCT = 20
SKU_PATTERN = r"^[A-Za-z0-9_-]{3,}$"

PRIORITY_HIGH = 3
PRIORITY_MEDIUM = 2
PRIORITY_LOW = 1
PRIORITY_LABELS = {PRIORITY_HIGH: "High", PRIORITY_MEDIUM: "Medium", PRIORITY_LOW: "Low"}

UNCATEGORIZED_LABEL = "Uncategorized"

# Authorization actions.
VIEW_INVENTORY = "VIEW_INVENTORY"
ADD_STOCK_MOVEMENT = "ADD_STOCK_MOVEMENT"
CREATE_PRODUCT = "CREATE_PRODUCT"
UPDATE_PRODUCT = "UPDATE_PRODUCT"
DEACTIVATE_PRODUCT = "DEACTIVATE_PRODUCT"
DELETE_PRODUCT = "DELETE_PRODUCT"
RECORD_SNAPSHOT = "RECORD_SNAPSHOT"
ADMIN_ACTIONS = frozenset({DEACTIVATE_PRODUCT, DELETE_PRODUCT, RECORD_SNAPSHOT})

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_VIEWER = "viewer"
