"""
Samaritan Core
==============
State machine behind the decentralized database's identity, topology and
access-control layer.

Provides:
- AccountRegistry: DID -> hashtable CID and authentication material
- NodeDirectory: bounded bootnode directory (deprecated subsystem)
- SubscriptionGraph: application <-> node subscriptions (deprecated subsystem)
- RestrictionLedger: per-application data access restrictions
- DbContract dispatcher, contract events, pluggable storage (SQLite default)
"""

from .contract import DbContract, build_contract
from .config import ContractConfig, load_config
from .errors import ContractError

__all__ = ["DbContract", "build_contract", "ContractConfig", "load_config", "ContractError"]
