from catena.encoding.coercion import (
    decode_text,
    normalize_hash,
    prep_address,
    prep_arg,
    prep_bytes,
    prep_int,
)
from catena.encoding.resolver import (
    ContractFunction,
    ContractInterface,
    Parameter,
    load_interface,
    resolve_named,
    resolve_positional,
)

__all__ = [
    "prep_arg",
    "prep_bytes",
    "prep_int",
    "prep_address",
    "normalize_hash",
    "decode_text",
    "Parameter",
    "ContractFunction",
    "ContractInterface",
    "load_interface",
    "resolve_named",
    "resolve_positional",
]
