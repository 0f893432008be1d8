"""
Operation payloads for the vesting module.

Each operation the ledger module exposes has one entry in OPERATIONS: the
ordered, typed layout of its arguments. Payloads are built and decoded
through that table only, so the create and release paths cannot drift
apart in argument order or encoding.

create_vesting(beneficiary: address, amounts: vector<u64>,
               release_times: vector<u64>, total_amount: u64, seed: string)
release_fund(grantor: address, seed: string)

Both take exactly one type argument: the token type being vested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.bcs import Deserializer, Serializer
from aptos_sdk.transactions import EntryFunction, ModuleId
from aptos_sdk.type_tag import StructTag, TypeTag

from tranchevest.core import config
from tranchevest.core.account_address import AddressLike, address_hex, to_address
from tranchevest.core.constants import CREATE_FUNCTION, RELEASE_FUNCTION, U64_MAX
from tranchevest.core.schedule_identity import seed_bytes
from tranchevest.core.schedule_validator import Tranche, validate
from tranchevest.core.vesting_exceptions import EncodingError, VestingError
from tranchevest.core.vesting_schedule import VestingSchedule

logger = logging.getLogger("tranchevest.core.payload_builder")


def _check_u64(value: Any) -> int:
    # bool is an int subclass but never a valid amount or time
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"u64 must be an int, got {type(value).__name__}")
    if not 0 <= value <= U64_MAX:
        raise EncodingError(f"u64 out of range: {value}", details={"value": value})
    return value


def _write_address(serializer: Serializer, value: AddressLike) -> None:
    serializer.struct(to_address(value))


def _write_u64(serializer: Serializer, value: int) -> None:
    serializer.u64(_check_u64(value))


def _write_u64_vector(serializer: Serializer, values: Sequence[int]) -> None:
    serializer.sequence([_check_u64(v) for v in values], Serializer.u64)


def _write_string(serializer: Serializer, value: str) -> None:
    if not isinstance(value, str):
        raise EncodingError(f"Expected str, got {type(value).__name__}")
    serializer.str(value)


def _read_address(deserializer: Deserializer) -> str:
    return address_hex(AccountAddress.deserialize(deserializer))


def _read_u64_vector(deserializer: Deserializer) -> List[int]:
    return deserializer.sequence(Deserializer.u64)


# type tag -> (writer, reader)
TYPE_CODECS: Dict[str, Tuple[Callable[[Serializer, Any], None], Callable[[Deserializer], Any]]] = {
    "address": (_write_address, _read_address),
    "u64": (_write_u64, Deserializer.u64),
    "vector<u64>": (_write_u64_vector, _read_u64_vector),
    "string": (_write_string, Deserializer.str),
}


def encode_argument(type_tag: str, value: Any) -> bytes:
    """Serialize one argument in the ledger's canonical encoding."""
    codec = TYPE_CODECS.get(type_tag)
    if codec is None:
        raise EncodingError(f"Unsupported argument type: {type_tag}")
    serializer = Serializer()
    try:
        codec[0](serializer, value)
    except VestingError:
        raise
    except Exception as exc:
        # the serializer signals range and type failures with plain Exception
        raise EncodingError(f"Cannot encode {type_tag}: {exc}") from exc
    return serializer.output()


def decode_argument(type_tag: str, raw: bytes) -> Any:
    """Deserialize one argument, rejecting truncated input and trailing bytes."""
    codec = TYPE_CODECS.get(type_tag)
    if codec is None:
        raise EncodingError(f"Unsupported argument type: {type_tag}")
    deserializer = Deserializer(raw)
    try:
        value = codec[1](deserializer)
    except Exception as exc:
        raise EncodingError(f"Cannot decode {type_tag}: {exc}") from exc
    if deserializer.remaining():
        raise EncodingError(
            "Trailing bytes after decoded value",
            details={"type_tag": type_tag, "trailing": deserializer.remaining()},
        )
    return value


@dataclass(frozen=True)
class ArgumentSpec:
    name: str
    type_tag: str
    check: Optional[Callable[[Any], Any]] = None


OPERATIONS: Dict[str, Tuple[ArgumentSpec, ...]] = {
    CREATE_FUNCTION: (
        ArgumentSpec("beneficiary", "address"),
        ArgumentSpec("amounts", "vector<u64>"),
        ArgumentSpec("release_times", "vector<u64>"),
        ArgumentSpec("total_amount", "u64"),
        ArgumentSpec("seed", "string", seed_bytes),
    ),
    RELEASE_FUNCTION: (
        ArgumentSpec("grantor", "address"),
        ArgumentSpec("seed", "string", seed_bytes),
    ),
}


@dataclass(frozen=True)
class OperationDescriptor:
    """
    Ledger-agnostic description of one module call.

    ``arguments`` holds each argument already encoded, in calling order.
    ``sender`` is the account expected to sign, when known.
    """

    module: str
    function: str
    type_arguments: Tuple[str, ...]
    arguments: Tuple[bytes, ...]
    sender: Optional[str] = None

    @property
    def operation_name(self) -> str:
        return f"{self.module}::{self.function}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module,
            "function": self.function,
            "type_arguments": list(self.type_arguments),
            "arguments": ["0x" + arg.hex() for arg in self.arguments],
            "sender": self.sender,
        }

    def to_entry_function(self) -> EntryFunction:
        """Wrap the descriptor as an entry function payload for a ledger client."""
        address, _, name = self.module.partition("::")
        if not name:
            raise EncodingError(f"Module id must be <address>::<name>, got {self.module!r}")
        try:
            type_tags = [TypeTag(StructTag.from_str(tag)) for tag in self.type_arguments]
        except Exception as exc:
            raise EncodingError(f"Invalid token type: {exc}") from exc
        return EntryFunction(
            ModuleId(to_address(address), name),
            self.function,
            type_tags,
            list(self.arguments),
        )


def _check_list_lengths(operation: str, values: Mapping[str, Any]) -> None:
    if operation != CREATE_FUNCTION:
        return
    amounts = values["amounts"]
    release_times = values["release_times"]
    if len(amounts) != len(release_times):
        raise EncodingError(
            f"Got {len(amounts)} amounts for {len(release_times)} release times",
            details={"amounts": len(amounts), "release_times": len(release_times)},
        )


def encode_arguments(
    operation: str,
    values: Mapping[str, Any],
    token_type: str,
    module: Optional[str] = None,
    sender: Optional[str] = None,
) -> OperationDescriptor:
    """
    Encode named argument values for ``operation`` through its layout.

    Raises:
        EncodingError: Unknown operation, missing argument, mismatched
            list lengths, or a value outside its type's range
    """
    layout = OPERATIONS.get(operation)
    if layout is None:
        raise EncodingError(f"Unknown vesting operation: {operation}")
    missing = [spec.name for spec in layout if spec.name not in values]
    if missing:
        raise EncodingError(
            f"Missing arguments for {operation}: {', '.join(missing)}",
            details={"missing": missing},
        )
    unexpected = sorted(set(values) - {spec.name for spec in layout})
    if unexpected:
        raise EncodingError(
            f"Unexpected arguments for {operation}: {', '.join(unexpected)}",
            details={"unexpected": unexpected},
        )
    if not isinstance(token_type, str) or not token_type:
        raise EncodingError("Token type identifier must be a non-empty string")
    _check_list_lengths(operation, values)

    for spec in layout:
        if spec.check is not None:
            spec.check(values[spec.name])
    encoded = tuple(encode_argument(spec.type_tag, values[spec.name]) for spec in layout)
    descriptor = OperationDescriptor(
        module=module or config.module_id(),
        function=operation,
        type_arguments=(token_type,),
        arguments=encoded,
        sender=sender,
    )
    logger.debug(
        "Built %s payload (%d arguments, %d bytes)",
        operation,
        len(encoded),
        sum(len(arg) for arg in encoded),
    )
    return descriptor


def decode_arguments(descriptor: OperationDescriptor) -> Dict[str, Any]:
    """
    Decode a descriptor's arguments back into named values.

    Raises:
        EncodingError: Unknown function, wrong argument count, truncated
            or trailing bytes, or mismatched list lengths
    """
    layout = OPERATIONS.get(descriptor.function)
    if layout is None:
        raise EncodingError(f"Unknown vesting operation: {descriptor.function}")
    if len(descriptor.arguments) != len(layout):
        raise EncodingError(
            f"{descriptor.function} takes {len(layout)} arguments, got {len(descriptor.arguments)}"
        )
    if len(descriptor.type_arguments) != 1:
        raise EncodingError(
            f"{descriptor.function} takes exactly one type argument, "
            f"got {len(descriptor.type_arguments)}"
        )

    decoded: Dict[str, Any] = {}
    for spec, raw in zip(layout, descriptor.arguments):
        decoded[spec.name] = decode_argument(spec.type_tag, raw)
    _check_list_lengths(descriptor.function, decoded)
    return decoded


def build_create_payload(
    grantor: AddressLike,
    beneficiary: AddressLike,
    tranches: Sequence[Tranche],
    total_amount: int,
    seed: str,
    token_type: Optional[str] = None,
    module: Optional[str] = None,
) -> OperationDescriptor:
    """
    Build the create_vesting call that funds a schedule from ``grantor``.

    Tranches are validated first; an invalid schedule never yields a payload.
    """
    validate(tranches, total_amount)
    amounts: List[int] = [t.amount for t in tranches]
    release_times: List[int] = [t.release_time for t in tranches]
    return encode_arguments(
        CREATE_FUNCTION,
        {
            "beneficiary": beneficiary,
            "amounts": amounts,
            "release_times": release_times,
            "total_amount": total_amount,
            "seed": seed,
        },
        token_type=token_type or config.DEFAULT_TOKEN,
        module=module,
        sender=address_hex(grantor),
    )


def build_release_payload(
    grantor: AddressLike,
    seed: str,
    token_type: Optional[str] = None,
    beneficiary: Optional[AddressLike] = None,
    module: Optional[str] = None,
) -> OperationDescriptor:
    """Build the release_fund call the beneficiary submits to claim what is due."""
    return encode_arguments(
        RELEASE_FUNCTION,
        {"grantor": grantor, "seed": seed},
        token_type=token_type or config.DEFAULT_TOKEN,
        module=module,
        sender=address_hex(beneficiary) if beneficiary is not None else None,
    )


def create_payload_for(schedule: VestingSchedule, token_type: Optional[str] = None) -> OperationDescriptor:
    return build_create_payload(
        schedule.grantor,
        schedule.beneficiary,
        schedule.tranches,
        schedule.total_amount,
        schedule.seed,
        token_type=token_type,
    )


def release_payload_for(schedule: VestingSchedule, token_type: Optional[str] = None) -> OperationDescriptor:
    return build_release_payload(
        schedule.grantor,
        schedule.seed,
        token_type=token_type,
        beneficiary=schedule.beneficiary,
    )
