import pytest

from catena.config import NETWORKS, Network, get_network_config
from catena.constants import GWEI
from catena.errors import ValidationError


def test_known_networks():
    assert get_network_config("live").network_id == 1
    assert get_network_config(Network.ROPSTEN).network_id == 3
    assert get_network_config("rinkeby").network_id == 4


@pytest.mark.parametrize("network", list(Network))
def test_gas_price_is_left_to_the_node(network):
    assert get_network_config(network).gas_price is None


def test_testrpc_accepts_any_network_id():
    cfg = get_network_config(Network.TESTRPC)
    assert cfg.network_id is None
    assert cfg.rpc_url == "http://localhost:7545"


def test_overrides_return_a_copy():
    cfg = get_network_config("live", rpc_url="http://node:8545", disclosure_manager="0xabc", gas_price=3 * GWEI)
    assert cfg.rpc_url == "http://node:8545"
    assert cfg.disclosure_manager == "0xabc"
    assert cfg.gas_price == 3 * GWEI
    assert cfg.agreement_tracker is None
    assert NETWORKS[Network.LIVE].rpc_url == "http://localhost:8545"
    assert NETWORKS[Network.LIVE].disclosure_manager is None
    assert NETWORKS[Network.LIVE].gas_price is None


def test_no_overrides_returns_shared_config():
    assert get_network_config("testrpc") is NETWORKS[Network.TESTRPC]


def test_unknown_network():
    with pytest.raises(ValidationError) as exc:
        get_network_config("kovan")
    assert "kovan" in exc.value.message
    assert "testrpc" in exc.value.details["known"]
