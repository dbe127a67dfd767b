"""ENS subdomain registry configuration constants.

Keep this file aligned with the deployed registry contract and the ENS
registry it is wired to.
"""

# Word sizes
ADDRESS_SIZE = 20
HASH_SIZE = 32
UINT256_MAX = 2**256 - 1

ZERO_ADDRESS = bytes(ADDRESS_SIZE)
ZERO_BYTES32 = bytes(HASH_SIZE)

# ENS root node (namehash of the empty name)
ROOT_NODE = ZERO_BYTES32

# Time
ONE_DAY = 24 * 3600
ONE_YEAR = 365 * ONE_DAY

# Registry
DEFAULT_RELEASE_DELAY = ONE_YEAR
# Time cannot start at zero on the test chain
GENESIS_TIMESTAMP = ONE_DAY

# Chain / network
CHAIN_ID_MAINNET = 1
CHAIN_ID_DEVNET = 1337
