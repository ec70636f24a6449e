from catena.config.networks import NETWORKS, Network, NetworkConfig, get_network_config

__all__ = ["Network", "NetworkConfig", "NETWORKS", "get_network_config"]
