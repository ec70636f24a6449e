"""
Shared fixtures: an in-memory chain standing in for AsyncWeb3.

``FakeChain`` holds the state of both contracts and mines one block per
transaction. ``FakeWeb3`` exposes the small async surface the bindings
use (``eth``/``net`` lookups, contract calls, receipts, logs), so the
real builder, orchestrator, correlator and client run against it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, TransactionNotFound

from catena.client import CatenaClient
from catena.config import Network, get_network_config
from catena.constants import GWEI, NULL_BYTES32
from catena.context import CatenaContext
from catena.models import DISCLOSURE_FIELDS

# Test-only key (DO NOT USE IN PRODUCTION)
OWNER_KEY = "0x" + "11" * 32
OWNER = Account.from_key(OWNER_KEY).address
SIGNER_A = Web3.to_checksum_address("0x" + "a1" * 20)
SIGNER_B = Web3.to_checksum_address("0x" + "b2" * 20)
OUTSIDER = Web3.to_checksum_address("0x" + "c3" * 20)

DISCLOSURE_MANAGER_ADDRESS = Web3.to_checksum_address("0x" + "d1" * 20)
AGREEMENT_TRACKER_ADDRESS = Web3.to_checksum_address("0x" + "a7" * 20)

GENESIS_TIMESTAMP = 1_500_000_000
NULL_HASH = bytes(32)


async def _resolved(value):
    return value


def _revert(reason: str):
    return ContractLogicError(f"execution reverted: {reason}")


def _key(tx_hash: Any) -> str:
    if isinstance(tx_hash, (bytes, bytearray)):
        tx_hash = Web3.to_hex(bytes(tx_hash))
    return tx_hash.lower()


# ----------------------------------------------------------------------
# Contract stubs
# ----------------------------------------------------------------------
class FakeCall:
    def __init__(self, contract: "FakeContract", fn_name: str, args: Tuple[Any, ...]):
        self.contract = contract
        self.fn_name = fn_name
        self.args = args

    async def call(self, *_args, **_kwargs):
        return getattr(self.contract, f"view_{self.fn_name}")(*self.args)

    async def estimate_gas(self, params=None):
        self.contract.chain.estimate_calls.append((self.fn_name, self.args, params))
        return 90_000

    async def transact(self, params=None):
        return self.contract.chain.execute(self.contract, self.fn_name, self.args, dict(params or {}))


class FakeFunctions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        return lambda *args: FakeCall(self._contract, name, args)


class FakeEvent:
    def __init__(self, contract: "FakeContract", name: str):
        self.contract = contract
        self.name = name

    def process_receipt(self, receipt, errors=None):
        # Decodes by topic only, like web3: the emitting address is not checked
        return [log for log in receipt["logs"] if log["event"] == self.name]

    async def get_logs(self, from_block=None, to_block=None):
        self.contract.chain.log_queries.append((self.name, from_block, to_block))
        return [
            log
            for log in self.contract.chain.logs
            if log["event"] == self.name
            and log["address"] == self.contract.address
            and from_block <= log["blockNumber"] <= to_block
        ]


class FakeEvents:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        return lambda: FakeEvent(self._contract, name)


class FakeContract:
    def __init__(self, chain: "FakeChain", address: str):
        self.chain = chain
        self.address = address
        self.functions = FakeFunctions(self)
        self.events = FakeEvents(self)

    def encode_abi(self, fn_name: str, args=None):
        return Web3.to_hex(text=f"{fn_name}{tuple(args or ())!r}")


class FakeDisclosureManager(FakeContract):
    def __init__(self, chain: "FakeChain", address: str):
        super().__init__(chain, address)
        self.rows: List[Dict[str, Any]] = []

    def view_owner(self):
        return self.chain.owner

    def view_getListCount(self):
        return len(self.rows)

    def view_pullRow(self, row_number):
        row = self.rows[row_number - 1]
        return [*row["fields"], row["amended"]]

    def view_pullEntry(self, row_number):
        return self.view_pullRow(row_number)

    def tx_newEntry(self, sender, *fields):
        return self._add(sender, fields, 0)

    def tx_amendEntry(self, sender, row_number, *fields):
        if not 0 < row_number <= len(self.rows):
            raise _revert("row does not exist")
        return self._add(sender, fields, row_number)

    def _add(self, sender, fields, amended):
        if sender != self.chain.owner:
            raise _revert("caller is not the owner")
        self.rows.append({"fields": list(fields), "amended": amended})
        args = dict(zip(DISCLOSURE_FIELDS, fields))
        args["rowNumber"] = len(self.rows)
        return [("disclosureAdded", args)]


class FakeAgreementTracker(FakeContract):
    def __init__(self, chain: "FakeChain", address: str, manager_address: str):
        super().__init__(chain, address)
        self.manager_address = manager_address
        self.agreements: Dict[bytes, Dict[str, Any]] = {}
        self.latest: Dict[int, Tuple[bytes, int]] = {}

    def view_disclosureManager(self):
        return self.manager_address

    def view_getAgreement(self, agreement_hash):
        a = self.agreements.get(bytes(agreement_hash))
        if a is None:
            return (NULL_HASH, 0, 0, 0, [], [])
        return (
            a["previous"],
            a["index"],
            a["block"],
            sum(a["signed"]),
            list(a["signatories"]),
            [not signed for signed in a["signed"]],
        )

    def view_latestMap(self, disclosure_index):
        return self.latest.get(disclosure_index, (NULL_HASH, 0))

    def view_hasAgreement(self, agreement_hash):
        return bytes(agreement_hash) in self.agreements

    def view_hasDisclosureAgreement(self, disclosure_index):
        return disclosure_index in self.latest

    def view_isAgreementFullySigned(self, agreement_hash):
        a = self.agreements.get(bytes(agreement_hash))
        return bool(a) and all(a["signed"])

    def view_isDisclosureFullySigned(self, disclosure_index):
        latest = self.latest.get(disclosure_index)
        return bool(latest) and self.view_isAgreementFullySigned(latest[0])

    def tx_addAgreement(self, sender, agreement_hash, disclosure_index, signatories):
        agreement_hash = bytes(agreement_hash)
        if agreement_hash in self.agreements:
            raise _revert("agreement exists")
        previous, count = self.latest.get(disclosure_index, (NULL_HASH, 0))
        self.agreements[agreement_hash] = {
            "previous": previous,
            "index": disclosure_index,
            "block": self.chain.block_number + 1,
            "signatories": list(signatories),
            "signed": [False] * len(signatories),
        }
        self.latest[disclosure_index] = (agreement_hash, count + 1)
        return [
            (
                "agreementAdded",
                {"agreementHash": agreement_hash, "disclosureIndex": disclosure_index, "signatories": signatories},
            )
        ]

    def tx_signAgreement(self, sender, agreement_hash):
        a = self.agreements.get(bytes(agreement_hash))
        if a is None:
            raise _revert("no such agreement")
        if sender not in a["signatories"]:
            raise _revert("sender is not a signatory")
        i = a["signatories"].index(sender)
        if a["signed"][i]:
            raise _revert("already signed")
        a["signed"][i] = True
        emitted = [("agreementSigned", {"agreementHash": bytes(agreement_hash), "signatory": sender})]
        if all(a["signed"]):
            emitted.append(("agreementFullySigned", {"agreementHash": bytes(agreement_hash)}))
        return emitted


# ----------------------------------------------------------------------
# Chain and provider stubs
# ----------------------------------------------------------------------
class FakeChain:
    def __init__(self, owner: str = OWNER, network_id: str = "5777", chain_id: int = 1337):
        self.owner = owner
        self.network_id = network_id
        self.chain_id = chain_id
        self.gas_price = 20 * GWEI
        self.block_number = 0
        self.timestamps: Dict[int, int] = {0: GENESIS_TIMESTAMP}
        self.receipts: Dict[str, Dict[str, Any]] = {}
        self.pending: Dict[str, Tuple[FakeContract, str, List[Tuple[str, Dict[str, Any]]]]] = {}
        self.logs: List[Dict[str, Any]] = []
        self.nonces: Dict[str, int] = {}
        self.auto_mine = True
        self.sent: List[Tuple[str, Tuple[Any, ...], Dict[str, Any]]] = []
        self.raw_sent: List[bytes] = []
        self.estimate_calls: List[Any] = []
        self.log_queries: List[Any] = []
        self.manager = FakeDisclosureManager(self, DISCLOSURE_MANAGER_ADDRESS)
        self.tracker = FakeAgreementTracker(self, AGREEMENT_TRACKER_ADDRESS, DISCLOSURE_MANAGER_ADDRESS)
        self.contracts = {c.address: c for c in (self.manager, self.tracker)}

    def execute(self, contract, fn_name, args, params):
        sender = params.get("from")
        emitted = getattr(contract, f"tx_{fn_name}")(sender, *args)
        nonce = self.nonces.get(sender, 0)
        self.nonces[sender] = nonce + 1
        tx_hash = Web3.keccak(text=f"{sender}:{nonce}:{fn_name}")
        self.sent.append((fn_name, args, params))
        self.pending[_key(tx_hash)] = (contract, fn_name, emitted)
        if self.auto_mine:
            self.mine()
        return tx_hash

    def mine(self):
        for key, (contract, _fn_name, emitted) in list(self.pending.items()):
            self.block_number += 1
            self.timestamps[self.block_number] = GENESIS_TIMESTAMP + 15 * self.block_number
            tx_hash = bytes.fromhex(key[2:])
            logs = [
                {
                    "event": name,
                    "args": args,
                    "address": contract.address,
                    "transactionHash": tx_hash,
                    "blockNumber": self.block_number,
                    "logIndex": i,
                }
                for i, (name, args) in enumerate(emitted)
            ]
            self.receipts[key] = {
                "transactionHash": tx_hash,
                "blockNumber": self.block_number,
                "status": 1,
                "logs": logs,
            }
            self.logs.extend(logs)
        self.pending.clear()


class FakeEth:
    def __init__(self, chain: FakeChain):
        self.chain = chain
        self.default_account = chain.owner

    @property
    def gas_price(self):
        return _resolved(self.chain.gas_price)

    @property
    def chain_id(self):
        return _resolved(self.chain.chain_id)

    @property
    def block_number(self):
        return _resolved(self.chain.block_number)

    def contract(self, address=None, abi=None):
        return self.chain.contracts[address]

    async def get_transaction_count(self, address, block_identifier="latest"):
        return self.chain.nonces.get(address, 0)

    async def get_block(self, block_number):
        return {"number": block_number, "timestamp": self.chain.timestamps[block_number]}

    async def send_raw_transaction(self, raw):
        self.chain.raw_sent.append(bytes(raw))
        return Web3.keccak(bytes(raw))

    async def wait_for_transaction_receipt(self, tx_hash, timeout=120, poll_latency=0.1):
        key = _key(tx_hash)
        if key in self.chain.pending:
            self.chain.mine()
        if key not in self.chain.receipts:
            raise TimeExhausted(f"Transaction {key} is not in the chain after {timeout} seconds")
        return self.chain.receipts[key]

    async def get_transaction_receipt(self, tx_hash):
        key = _key(tx_hash)
        if key not in self.chain.receipts:
            raise TransactionNotFound(f"Transaction with hash: '{key}' not found.")
        return self.chain.receipts[key]


class FakeNet:
    def __init__(self, chain: FakeChain):
        self.chain = chain

    @property
    def version(self):
        return _resolved(self.chain.network_id)


class FakeWeb3:
    def __init__(self, chain: FakeChain):
        self.eth = FakeEth(chain)
        self.net = FakeNet(chain)


# ----------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------
@pytest.fixture()
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def w3(chain) -> FakeWeb3:
    return FakeWeb3(chain)


@pytest.fixture()
def ctx(w3) -> CatenaContext:
    config = get_network_config(
        Network.TESTRPC,
        disclosure_manager=DISCLOSURE_MANAGER_ADDRESS,
        agreement_tracker=AGREEMENT_TRACKER_ADDRESS,
    )
    return CatenaContext.from_config(config, web3=w3, receipt_timeout=5)


@pytest.fixture()
def client(ctx) -> CatenaClient:
    return CatenaClient(ctx)


@pytest.fixture()
def accounts() -> Dict[str, str]:
    return {
        "owner": OWNER,
        "owner_key": OWNER_KEY,
        "signer_a": SIGNER_A,
        "signer_b": SIGNER_B,
        "outsider": OUTSIDER,
        "disclosure_manager": DISCLOSURE_MANAGER_ADDRESS,
        "agreement_tracker": AGREEMENT_TRACKER_ADDRESS,
    }


@pytest.fixture()
def disclosure_data() -> Dict[str, Optional[str]]:
    return {
        "organization": "TEST ORG",
        "recipient": "GRANDMAS BAKING LTD.",
        "location": "WINNIPEG,MB,CA",
        "amount": "CAD 333770",
        "fundingType": "C",
        "date": "2016-Q1",
        "purpose": "NAICS:54321",
        "comment": "",
    }


@pytest.fixture()
def null_hash() -> str:
    return NULL_BYTES32
