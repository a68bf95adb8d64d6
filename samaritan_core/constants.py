# samaritan_core/constants.py

SCHEMA_VERSION = "1.0"

# Bootnode directory capacity used when no configuration overrides it.
DEFAULT_MAX_NODES = 10

# Literal separator of every list the contract serializes to bytes.
LIST_SEPARATOR = b"$$$"

MAX_DID_LENGTH = 256
MAX_CID_LENGTH = 256
MAX_ADDRESS_LENGTH = 512
MAX_AUTH_MATERIAL_LENGTH = 4096

DEFAULT_EVENT_TOPIC_PREFIX = "samaritan.contract"
DEFAULT_DB_PATH = "db/samaritan_state.db"
