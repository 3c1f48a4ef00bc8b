"""String-in/string-out operations exposed to the host.

Every integer crosses this boundary as a string: ``0x``-prefixed hex or plain
decimal.  Results come back in the radix of the input they were derived from.
"""
from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sra.config import EngineConfig
from sra.errors import InvalidParameter
from sra.quad_residues import check_residues as _check_residues
from sra.quad_residues import generate_quad_residues
from sra.radix import check_radix, format_int, parse_int, parse_int_in
from sra.randomness import RandomSource
from sra.sra_from_scratch import (
    Keypair,
    check_prime as _check_prime,
    decrypt_int,
    encrypt_int,
    generate_random_keypair,
    generate_random_prime,
)

__all__ = [
    "random_prime",
    "check_prime",
    "random_keypair",
    "random_quad_residues",
    "check_residues",
    "encrypt",
    "decrypt",
    "keypair_from_params",
]


def _require_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f"{field} must be an integer")
    return value


def keypair_from_params(params: Mapping[str, Any], *, key_field: str) -> tuple[Keypair, int]:
    """Rebuild a :class:`Keypair` from its boundary mapping.

    The radix is taken from *key_field* (``encKey`` or ``decKey``); the other
    two fields must use the same prefix convention.
    """

    if not isinstance(params, Mapping):
        raise InvalidParameter("keypair must be a mapping")
    try:
        key_text = params[key_field]
        prime_text = params["prime"]
    except KeyError as exc:
        raise InvalidParameter(f"keypair is missing field: {exc.args[0]}") from exc

    key, radix = parse_int(key_text, field=key_field)
    prime = parse_int_in(prime_text, radix, field="prime")
    other_field = "decKey" if key_field == "encKey" else "encKey"
    other_text = params.get(other_field)
    other = 0 if other_text is None else parse_int_in(other_text, radix, field=other_field)
    if key_field == "encKey":
        return Keypair(enc_key=key, dec_key=other, prime=prime), radix
    return Keypair(enc_key=other, dec_key=key, prime=prime), radix


def random_prime(
    bit_length: int,
    radix: int = 16,
    *,
    source: Optional[RandomSource] = None,
    config: Optional[EngineConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> str:
    _require_int(bit_length, field="bitLength")
    check_radix(radix)
    prime = generate_random_prime(bit_length, source=source, config=config, cancel=cancel)
    return format_int(prime, radix)


def check_prime(prime: str) -> bool:
    value, _ = parse_int(prime, field="prime")
    return _check_prime(value)


def random_keypair(
    prime: str,
    *,
    source: Optional[RandomSource] = None,
    config: Optional[EngineConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> Dict[str, str]:
    value, radix = parse_int(prime, field="prime")
    keypair = generate_random_keypair(value, source=source, config=config, cancel=cancel)
    return keypair.to_params(radix)


def random_quad_residues(
    prime: str,
    num_values: int,
    *,
    config: Optional[EngineConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> List[str]:
    value, radix = parse_int(prime, field="prime")
    _require_int(num_values, field="numValues")
    residues = generate_quad_residues(value, num_values, config=config, cancel=cancel)
    return [format_int(residue, radix) for residue in residues]


def check_residues(
    residues: Sequence[str],
    prime: str,
    *,
    config: Optional[EngineConfig] = None,
) -> List[str]:
    """Classify each residue string; each result keeps its input's radix."""

    if isinstance(residues, str) or not isinstance(residues, Sequence):
        raise InvalidParameter("residues must be a list of strings")
    prime_value, _ = parse_int(prime, field="prime")
    parsed = [parse_int(text, field=f"residues[{i}]") for i, text in enumerate(residues)]
    classes = _check_residues((value for value, _ in parsed), prime_value, config=config)
    return [format_int(cls, radix) for cls, (_, radix) in zip(classes, parsed)]


def encrypt(value: str, keypair: Mapping[str, Any]) -> str:
    number, value_radix = parse_int(value, field="value")
    pair, _ = keypair_from_params(keypair, key_field="encKey")
    return format_int(encrypt_int(number, pair), value_radix)


def decrypt(value: str, keypair: Mapping[str, Any]) -> str:
    number, value_radix = parse_int(value, field="value")
    pair, _ = keypair_from_params(keypair, key_field="decKey")
    return format_int(decrypt_int(number, pair), value_radix)
