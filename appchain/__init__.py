"""LBP Appchain - liquidity bootstrapping pool runtime with XYK migration."""

from appchain.runtime import AppChain, Block, TransactionReceipt, get_default_chain

__version__ = "0.1.0"
__all__ = ["AppChain", "Block", "TransactionReceipt", "get_default_chain", "__version__"]
