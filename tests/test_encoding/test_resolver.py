import pytest

from catena.constants import AGREEMENT_TRACKER, DISCLOSURE_MANAGER
from catena.encoding import load_interface, resolve_named, resolve_positional
from catena.errors import InvalidArgumentType, MissingArgument, UnknownFunction


@pytest.fixture()
def manager():
    return load_interface(DISCLOSURE_MANAGER)


def _fields(**overrides):
    fields = {
        "organization": "TEST ORG",
        "recipient": "GRANDMAS BAKING LTD.",
        "location": "WINNIPEG,MB,CA",
        "amount": "CAD 333770",
        "fundingType": "C",
        "date": "2016-Q1",
        "purpose": "NAICS:54321",
        "comment": "",
    }
    fields.update(overrides)
    return fields


def test_interface_describes_publish_functions(manager):
    new_entry = manager.function("newEntry")
    assert [p.name for p in new_entry.inputs] == [
        "organization",
        "recipient",
        "location",
        "amount",
        "fundingType",
        "date",
        "purpose",
        "comment",
    ]
    amend = manager.function("amendEntry")
    assert amend.inputs[0].name == "rowNumber"
    assert amend.inputs[0].type == "uint256"
    assert manager.function("pullRow").read_only
    assert not new_entry.read_only
    assert "disclosureAdded" in manager.events


def test_tracker_interface_has_agreement_events():
    tracker = load_interface(AGREEMENT_TRACKER)
    assert set(tracker.events) >= {"agreementAdded", "agreementSigned", "agreementFullySigned"}
    assert tracker.function("addAgreement").signature == "addAgreement(bytes32,uint256,address[])"


def test_unknown_function(manager):
    with pytest.raises(UnknownFunction) as exc:
        manager.function("deleteEntry")
    assert exc.value.contract_name == DISCLOSURE_MANAGER
    assert "deleteEntry" in str(exc.value)


def test_resolve_named_orders_by_declared_parameters(manager):
    args = dict(reversed(list(_fields().items())))
    resolved = resolve_named(manager.function("newEntry"), args)
    assert resolved[0] == b"TEST ORG".ljust(32, b"\x00")
    assert resolved[4] == b"C"
    assert len(resolved[3]) == 16


def test_resolve_named_ignores_extra_keys(manager):
    resolved = resolve_named(manager.function("newEntry"), _fields(id="a1", txId=None))
    assert len(resolved) == 8


@pytest.mark.parametrize("missing", ["purpose", "fundingType"])
def test_missing_argument_names_param_and_type(manager, missing):
    args = _fields()
    del args[missing]
    with pytest.raises(MissingArgument) as exc:
        resolve_named(manager.function("newEntry"), args)
    assert exc.value.name == missing
    assert exc.value.abi_type in ("bytes32", "bytes1")
    assert "newEntry" in str(exc.value)


def test_none_counts_as_missing(manager):
    with pytest.raises(MissingArgument):
        resolve_named(manager.function("newEntry"), _fields(comment=None))


def test_resolve_positional(manager):
    resolved = resolve_positional(manager.function("pullRow"), [3])
    assert resolved == [3]
    with pytest.raises(MissingArgument) as exc:
        resolve_positional(manager.function("pullRow"), [])
    assert exc.value.name == "rowNumber"


def test_coercion_errors_surface_through_resolver(manager):
    with pytest.raises(InvalidArgumentType):
        resolve_named(manager.function("newEntry"), _fields(organization={"nested": True}))
