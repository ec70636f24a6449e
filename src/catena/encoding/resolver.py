"""
Contract function descriptors and argument resolution.

A ``ContractInterface`` is built once from a contract ABI and never
mutated. Arguments are resolved against it in one of two explicit forms:
``resolve_named`` for a mapping keyed by parameter name and
``resolve_positional`` for an ordered sequence. Both are pure and never
touch the network, so an invalid call fails before anything is sent.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from catena.encoding.coercion import prep_arg
from catena.errors import MissingArgument, UnknownFunction

ABI_DIR = Path(__file__).resolve().parent.parent / "abis"


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str


@dataclass(frozen=True)
class ContractFunction:
    """Descriptor of a single ABI function.

    Attributes:
        name: Function name as declared in the contract
        inputs: Ordered parameters
        outputs: Ordered return values
        read_only: True for view/pure functions
    """

    name: str
    inputs: Tuple[Parameter, ...]
    outputs: Tuple[Parameter, ...] = ()
    read_only: bool = False

    @classmethod
    def from_abi(cls, entry: Mapping[str, Any]) -> "ContractFunction":
        state = entry.get("stateMutability")
        read_only = state in ("view", "pure") if state else bool(entry.get("constant"))
        return cls(
            name=entry["name"],
            inputs=tuple(Parameter(p.get("name", ""), p["type"]) for p in entry.get("inputs", [])),
            outputs=tuple(Parameter(p.get("name", ""), p["type"]) for p in entry.get("outputs", [])),
            read_only=read_only,
        )

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(p.type for p in self.inputs)})"


@dataclass(frozen=True)
class ContractInterface:
    """Read-only function table of one contract."""

    contract_name: str
    abi: Tuple[Mapping[str, Any], ...]
    functions: Mapping[str, ContractFunction]
    events: Tuple[str, ...]

    @classmethod
    def from_abi(cls, contract_name: str, abi: Sequence[Mapping[str, Any]]) -> "ContractInterface":
        functions: Dict[str, ContractFunction] = {}
        events: List[str] = []
        for entry in abi:
            if entry.get("type") == "function":
                functions[entry["name"]] = ContractFunction.from_abi(entry)
            elif entry.get("type") == "event":
                events.append(entry["name"])
        return cls(
            contract_name=contract_name,
            abi=tuple(abi),
            functions=functions,
            events=tuple(events),
        )

    def function(self, name: str) -> ContractFunction:
        try:
            return self.functions[name]
        except KeyError:
            raise UnknownFunction(name, self.contract_name) from None


def _snake_case(name: str) -> str:
    out = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            out.append("_")
        out.append(char.lower())
    return "".join(out)


@lru_cache(maxsize=None)
def _read_abi(file_name: str) -> str:
    return (ABI_DIR / file_name).read_text()


def load_interface(contract_name: str) -> ContractInterface:
    """Load the interface shipped under ``catena/abis``.

    Args:
        contract_name: Contract name (e.g., "DisclosureManager")

    Returns:
        Parsed ContractInterface
    """
    abi = json.loads(_read_abi(f"{_snake_case(contract_name)}.json"))
    return ContractInterface.from_abi(contract_name, abi)


def resolve_named(function: ContractFunction, args: Mapping[str, Any]) -> List[Any]:
    """Order and coerce a mapping of arguments keyed by parameter name.

    Raises:
        MissingArgument: If a declared parameter is absent or None
        InvalidArgumentType: If a value cannot be coerced
    """
    resolved = []
    for param in function.inputs:
        value = args.get(param.name)
        if value is None:
            raise MissingArgument(param.name, param.type, function.name)
        resolved.append(prep_arg(param.type, value, param.name))
    return resolved


def resolve_positional(function: ContractFunction, args: Sequence[Any]) -> List[Any]:
    """Coerce an ordered sequence of arguments.

    Raises:
        MissingArgument: If the sequence is short or holds None
        InvalidArgumentType: If a value cannot be coerced
    """
    resolved = []
    for i, param in enumerate(function.inputs):
        value = args[i] if i < len(args) else None
        if value is None:
            raise MissingArgument(param.name, param.type, function.name)
        resolved.append(prep_arg(param.type, value, param.name))
    return resolved


__all__ = [
    "ABI_DIR",
    "Parameter",
    "ContractFunction",
    "ContractInterface",
    "load_interface",
    "resolve_named",
    "resolve_positional",
]
