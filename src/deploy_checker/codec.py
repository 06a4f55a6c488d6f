"""
Storage Word Codec

EVM storage slots and call results are 32-byte words. An address stored
in a word is right-aligned: the low 20 bytes hold it and the high 12
bytes are padding, which is ignored rather than validated.
"""

from typing import Union

from .errors import StorageDecodeError
from .main import Address, normalize_address

WORD_SIZE = 32
ADDRESS_SIZE = 20


def to_word(value: Union[bytes, bytearray, str]) -> bytes:
    """Coerce a 0x-prefixed hex string or raw bytes to a 32-byte word"""
    if isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            value = bytes.fromhex(text)
        except ValueError:
            raise StorageDecodeError(f"Storage word is not hex: {value!r}")

    if not isinstance(value, (bytes, bytearray)):
        raise StorageDecodeError(f"Unsupported storage word type: {type(value).__name__}")

    if len(value) != WORD_SIZE:
        raise StorageDecodeError(
            f"Storage word must be {WORD_SIZE} bytes, got {len(value)}"
        )
    return bytes(value)


def decode_address_word(value: Union[bytes, bytearray, str]) -> Address:
    """Decode the address held in the low 20 bytes of a storage word"""
    word = to_word(value)
    return normalize_address("0x" + word[WORD_SIZE - ADDRESS_SIZE:].hex())


def encode_address_word(address: Address) -> bytes:
    """Right-align an address in a zero-padded 32-byte word"""
    raw = bytes.fromhex(normalize_address(address)[2:])
    return bytes(WORD_SIZE - ADDRESS_SIZE) + raw
