# src/ase/ledger/constants.py
from __future__ import annotations

"""Genesis monetary constants and hard ledger limits.

- Token: Àṣẹ (ASE), 18 decimals
- Genesis supply: 1,000,000 ASE, minted to the deployer
- Contribution points saturate at the u128 ceiling, prayer counters at u64
"""

# Monetary precision (1 ASE = 1e-18 units)
TOKEN_NAME: str = "Àṣẹ"
TOKEN_SYMBOL: str = "ASE"
TOKEN_DECIMALS: int = 18
UNIT: int = 10**TOKEN_DECIMALS

INITIAL_SUPPLY_ASE: int = 1_000_000
INITIAL_SUPPLY: int = INITIAL_SUPPLY_ASE * UNIT

# Field widths
U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1
U256_MAX: int = (1 << 256) - 1

# Allowance equal to U256_MAX is never decremented
INFINITE_ALLOWANCE: int = U256_MAX

# Upper bound on recipients per batch prayer offering
MAX_BATCH_RECIPIENTS: int = 20

# Points required to organize a gathering ("Circle Holder")
GATHERING_MIN_POINTS: int = 100

# Access-control roles
ADMIN_ROLE: str = "ADMIN_ROLE"
TREASURY_ROLE: str = "TREASURY_ROLE"
ORGANIZER_ROLE: str = "ORGANIZER_ROLE"
ALL_ROLES = (ADMIN_ROLE, TREASURY_ROLE, ORGANIZER_ROLE)

# Default principal id of the ledger's own custodial account
LEDGER_ACCOUNT_ID: str = "LEDGER"

STATE_VERSION: int = 1
