"""
PushDrop record decoder.

Lookup results carry their record as a locking script of the form::

    <locking public key> OP_CHECKSIG <field 0> ... <field n-1> <signature> OP_DROP...

This module parses such a script into a DecodedRecord. The signature is
not verified here; the resolver only needs the data fields.
"""

from typing import Optional, Protocol, Union

from .enums import FieldFormat
from .exceptions import RecordDecodeError
from .models import DecodedRecord


OP_0 = 0x00
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E
OP_1NEGATE = 0x4F
OP_1 = 0x51
OP_16 = 0x60
OP_DROP = 0x75
OP_2DROP = 0x6D
OP_CHECKSIG = 0xAC


class RecordDecoder(Protocol):
    """Anything that can turn a lookup record into a DecodedRecord."""

    def decode(
        self,
        script: Union[str, bytes],
        field_format: FieldFormat = FieldFormat.BUFFER,
    ) -> DecodedRecord:
        ...


class ScriptChunk:
    """A single opcode, with its pushed data if it is a push."""

    __slots__ = ("opcode", "data")

    def __init__(self, opcode: int, data: Optional[bytes] = None) -> None:
        self.opcode = opcode
        self.data = data

    def as_field(self) -> Optional[bytes]:
        """Return the value this chunk pushes onto the stack, if any."""
        if self.data is not None:
            return self.data
        if self.opcode == OP_0:
            return b""
        if self.opcode == OP_1NEGATE:
            return b"\x81"
        if OP_1 <= self.opcode <= OP_16:
            return bytes([self.opcode - OP_1 + 1])
        return None


def parse_script(script: bytes) -> list[ScriptChunk]:
    """
    Split a raw script into chunks.

    Raises:
        RecordDecodeError: If a push runs past the end of the script
    """
    chunks: list[ScriptChunk] = []
    i = 0
    while i < len(script):
        opcode = script[i]
        i += 1

        if 0x01 <= opcode < OP_PUSHDATA1:
            length = opcode
        elif opcode == OP_PUSHDATA1:
            length, i = _read_length(script, i, 1)
        elif opcode == OP_PUSHDATA2:
            length, i = _read_length(script, i, 2)
        elif opcode == OP_PUSHDATA4:
            length, i = _read_length(script, i, 4)
        else:
            chunks.append(ScriptChunk(opcode))
            continue

        if i + length > len(script):
            raise RecordDecodeError(
                "Script push exceeds script length",
                details={"offset": i, "push_length": length, "script_length": len(script)},
            )
        chunks.append(ScriptChunk(opcode, script[i:i + length]))
        i += length

    return chunks


def _read_length(script: bytes, offset: int, size: int) -> tuple[int, int]:
    if offset + size > len(script):
        raise RecordDecodeError(
            "Truncated PUSHDATA length",
            details={"offset": offset},
        )
    return int.from_bytes(script[offset:offset + size], "little"), offset + size


def _format_field(value: bytes, field_format: FieldFormat) -> Union[bytes, str]:
    if field_format == FieldFormat.BUFFER:
        return value
    if field_format == FieldFormat.HEX:
        return value.hex()
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RecordDecodeError(
            "Field is not valid UTF-8",
            details={"field_hex": value.hex()},
        ) from e


class PushDropDecoder:
    """Default RecordDecoder for PushDrop locking scripts."""

    def decode(
        self,
        script: Union[str, bytes],
        field_format: FieldFormat = FieldFormat.BUFFER,
    ) -> DecodedRecord:
        """
        Decode a PushDrop script.

        Args:
            script: Hex string or raw script bytes
            field_format: Representation of the returned fields

        Returns:
            DecodedRecord with data fields, locking key and signature

        Raises:
            RecordDecodeError: If the script is not a PushDrop script
        """
        if isinstance(script, str):
            try:
                raw = bytes.fromhex(script.strip())
            except ValueError as e:
                raise RecordDecodeError(
                    "Script is not valid hex",
                    details={"script": script[:64]},
                ) from e
        else:
            raw = bytes(script)

        chunks = parse_script(raw)
        if len(chunks) < 3 or chunks[0].data is None or chunks[1].opcode != OP_CHECKSIG:
            raise RecordDecodeError(
                "Script does not start with <pubkey> OP_CHECKSIG",
                details={"chunk_count": len(chunks)},
            )

        pushed: list[bytes] = []
        for index in range(2, len(chunks)):
            value = chunks[index].as_field()
            if value is None:
                break
            pushed.append(value)
            following = chunks[index + 1].opcode if index + 1 < len(chunks) else None
            if following in (OP_DROP, OP_2DROP):
                break

        if not pushed:
            raise RecordDecodeError("Script carries no data fields")

        signature = pushed.pop()
        return DecodedRecord(
            fields=[_format_field(value, field_format) for value in pushed],
            locking_public_key=chunks[0].data.hex(),
            signature=signature.hex(),
        )


_default_decoder = PushDropDecoder()


def decode(
    script: Union[str, bytes],
    field_format: FieldFormat = FieldFormat.BUFFER,
) -> DecodedRecord:
    """Decode a PushDrop script with the default decoder."""
    return _default_decoder.decode(script, field_format)
