from typing import Literal

# type aliases for clarity
EthereumAddress = str
BigNumber = str
HexBytes32 = str

Reason = Literal["empty", "unchanged", "pushed", "no-signer", "push-failed"]

# bytes32(0): published when nobody minted in the window, never pushed on-chain
EMPTY_ROOT: HexBytes32 = "0x" + "00" * 32
