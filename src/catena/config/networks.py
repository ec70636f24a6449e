from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from catena.errors import ValidationError

__all__ = ["Network", "NetworkConfig", "NETWORKS", "get_network_config"]


class Network(str, Enum):
    LIVE = "live"
    ROPSTEN = "ropsten"
    RINKEBY = "rinkeby"
    TESTRPC = "testrpc"


@dataclass(frozen=True)
class NetworkConfig:
    name: Network
    network_id: Optional[int]  # None accepts whatever the node reports
    rpc_url: str
    gas_price: Optional[int] = None  # None delegates to eth_gasPrice
    disclosure_manager: Optional[str] = None
    agreement_tracker: Optional[str] = None


NETWORKS: dict[Network, NetworkConfig] = {
    Network.LIVE: NetworkConfig(
        name=Network.LIVE,
        network_id=1,
        rpc_url="http://localhost:8545",
    ),
    Network.ROPSTEN: NetworkConfig(
        name=Network.ROPSTEN,
        network_id=3,
        rpc_url="http://localhost:8545",
    ),
    Network.RINKEBY: NetworkConfig(
        name=Network.RINKEBY,
        network_id=4,
        rpc_url="http://localhost:8545",
    ),
    Network.TESTRPC: NetworkConfig(
        name=Network.TESTRPC,
        network_id=None,
        rpc_url="http://localhost:7545",
    ),
}


def get_network_config(
    network: Union[Network, str],
    rpc_url: Optional[str] = None,
    disclosure_manager: Optional[str] = None,
    agreement_tracker: Optional[str] = None,
    gas_price: Optional[int] = None,
) -> NetworkConfig:
    try:
        cfg = NETWORKS[Network(network)]
    except ValueError:
        raise ValidationError(
            f"Unknown network: {network}",
            details={"known": [n.value for n in Network]},
        ) from None
    overrides = {
        key: value
        for key, value in (
            ("rpc_url", rpc_url),
            ("disclosure_manager", disclosure_manager),
            ("agreement_tracker", agreement_tracker),
            ("gas_price", gas_price),
        )
        if value is not None and value != ""
    }
    if overrides:
        return replace(cfg, **overrides)
    return cfg
