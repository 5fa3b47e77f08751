"""Core constants"""

from pathlib import Path

from safe_eth.eth.constants import NULL_ADDRESS  # noqa: F401

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

SECRETS_PATH = PROJECT_ROOT / "secrets.env"
LOG_PATH = PROJECT_ROOT / "multisend.log"

# Function selectors
MULTISEND_SELECTOR = "0x8d80ff0a"
SELECTOR_HEX_LENGTH = 8

# EIP-712 type hashes used by the Safe contracts
# keccak256("EIP712Domain(uint256 chainId,address verifyingContract)")
DOMAIN_SEPARATOR_TYPEHASH = "0x47e79534a245952e8b16893a336b85a3d9ea9fa8c573f3d803afb92a79469218"
# keccak256("EIP712Domain(address verifyingContract)"), Safe <= 1.2.0
DOMAIN_SEPARATOR_TYPEHASH_OLD = "0x035aff83d86937d35b32e04f0ddc6ff469290eef2f1b692d8a815c89404d4749"
SAFE_TX_TYPEHASH = "0xbb8310d486368db6bd6f849402fdd73ad53d316b5a4b2644ad6efe0f941286d8"
# Safe < 1.0.0 named baseGas "dataGas"
SAFE_TX_TYPEHASH_OLD = "0x14d461bc7412367e924637b363c7bf29b8f47e2f84869f4426e5633d8af47b20"

DEFAULT_SAFE_VERSION = "1.3.0"
OPENCHAIN_LOOKUP_URL = "https://api.openchain.xyz/signature-database/v1/lookup"
