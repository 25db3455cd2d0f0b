"""
Network configuration for the Starknet RPC SDK.
"""
import importlib.resources
import json
import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class StarknetChainId(str, Enum):
    """Chain ids of public Starknet networks (short strings encoded as felts)"""
    MAINNET = "0x534e5f4d41494e"  # SN_MAIN
    TESTNET = "0x534e5f474f45524c49"  # SN_GOERLI
    TESTNET2 = "0x534e5f474f45524c4932"  # SN_GOERLI2


class NetworkConfig:
    """
    Bundled network settings (RPC endpoint and chain id per network).

    The RPC URL of a network can be overridden with the environment variable
    <NETWORK>_RPC_URL, e.g. TESTNET2_RPC_URL.
    """
    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network configurations from the bundled networks.json

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is None:
            resource = importlib.resources.files("starknet_rpc_sdk").joinpath("networks.json")
            with resource.open("r", encoding="utf-8") as f:
                cls._networks_cache = json.load(f)
            logger.debug(f"Loaded {len(cls._networks_cache)} network configurations")
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the configuration of a network

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network}'. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Get the RPC URL of a network

        Args:
            network: Network name
            override: URL to use instead of the configured one

        Returns:
            override if given, else <NETWORK>_RPC_URL if set, else the bundled URL
        """
        if override:
            return override

        env_var = f"{network.upper().replace('-', '_')}_RPC_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            logger.debug(f"Using RPC URL from {env_var}")
            return env_url

        return cls.get_network(network)["rpc"]

    @classmethod
    def get_chain_id(cls, network: str) -> str:
        return cls.get_network(network)["chainId"]
