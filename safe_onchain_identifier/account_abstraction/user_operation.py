import dataclasses
from typing import Optional, Tuple

from eth_abi import encode as abi_encode
from eth_abi.packed import encode_packed
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from safe_eth.eth.utils import fast_keccak, fast_to_checksum_address


class InvalidUserOperation(ValueError):
    pass


@dataclasses.dataclass(eq=True, frozen=True)
class PackedUserOperation:
    """
    EIP4337 PackedUserOperation for Entrypoint v0.7, as the EntryPoint and the Safe4337Module expect it

    https://github.com/eth-infinitism/account-abstraction/blob/v0.7.0/contracts/interfaces/PackedUserOperation.sol
    """

    sender: ChecksumAddress
    nonce: int
    init_code: bytes
    call_data: bytes
    account_gas_limits: bytes
    pre_verification_gas: int
    gas_fees: bytes
    paymaster_and_data: bytes
    signature: bytes

    def as_tuple(
        self,
    ) -> Tuple[ChecksumAddress, int, bytes, bytes, bytes, int, bytes, bytes, bytes]:
        """
        :return: Struct ready to be used as a contract call argument
        """
        return (
            self.sender,
            self.nonce,
            self.init_code,
            self.call_data,
            self.account_gas_limits,
            self.pre_verification_gas,
            self.gas_fees,
            self.paymaster_and_data,
            self.signature,
        )


@dataclasses.dataclass(eq=True, frozen=True)
class UserOperation:
    """
    Human friendly EIP4337 UserOperation for Entrypoint v0.7. Use ``pack`` to get the wire representation

    ``factory`` and ``factory_data`` must be set together (only when ``sender`` is not deployed yet),
    same for ``paymaster`` and its gas limits and data
    """

    sender: ChecksumAddress
    nonce: int
    call_data: bytes
    call_gas_limit: int
    verification_gas_limit: int
    pre_verification_gas: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    signature: bytes = b""
    factory: Optional[ChecksumAddress] = None
    factory_data: Optional[bytes] = None
    paymaster: Optional[ChecksumAddress] = None
    paymaster_verification_gas_limit: Optional[int] = None
    paymaster_post_op_gas_limit: Optional[int] = None
    paymaster_data: Optional[bytes] = None

    def __post_init__(self):
        if (self.factory is None) != (self.factory_data is None):
            raise InvalidUserOperation(
                "`factory` and `factory_data` must be both set or both missing"
            )
        paymaster_fields = (
            self.paymaster,
            self.paymaster_verification_gas_limit,
            self.paymaster_post_op_gas_limit,
            self.paymaster_data,
        )
        if any(field is None for field in paymaster_fields) and any(
            field is not None for field in paymaster_fields
        ):
            raise InvalidUserOperation(
                "`paymaster`, `paymaster_verification_gas_limit`, `paymaster_post_op_gas_limit` "
                "and `paymaster_data` must be all set or all missing"
            )

    @property
    def init_code(self) -> bytes:
        """
        :return: ``factory`` address + ``factory_data`` tightly packed, empty if no ``factory`` is set
        """
        if self.factory is None:
            return b""
        return encode_packed(
            ["address", "bytes"],
            [fast_to_checksum_address(self.factory), HexBytes(self.factory_data)],
        )

    @property
    def account_gas_limits(self) -> bytes:
        """
        :return: Account Gas Limits is a `bytes32` in Solidity, first `bytes16` `verification_gas_limit`
            and then `call_gas_limit`
        """
        return encode_packed(
            ["uint128", "uint128"], [self.verification_gas_limit, self.call_gas_limit]
        )

    @property
    def gas_fees(self) -> bytes:
        """
        :return: Gas Fees is a `bytes32` in Solidity, first `bytes16` `max_priority_fee_per_gas`
            and then `max_fee_per_gas`
        """
        return encode_packed(
            ["uint128", "uint128"], [self.max_priority_fee_per_gas, self.max_fee_per_gas]
        )

    @property
    def paymaster_and_data(self) -> bytes:
        if self.paymaster is None:
            return b""
        return encode_packed(
            ["address", "uint128", "uint128", "bytes"],
            [
                fast_to_checksum_address(self.paymaster),
                self.paymaster_verification_gas_limit,
                self.paymaster_post_op_gas_limit,
                HexBytes(self.paymaster_data),
            ],
        )

    def with_signature(self, signature: bytes) -> "UserOperation":
        return dataclasses.replace(self, signature=HexBytes(signature))

    def pack(self) -> PackedUserOperation:
        return PackedUserOperation(
            fast_to_checksum_address(self.sender),
            self.nonce,
            self.init_code,
            HexBytes(self.call_data),
            self.account_gas_limits,
            self.pre_verification_gas,
            self.gas_fees,
            self.paymaster_and_data,
            HexBytes(self.signature),
        )

    def calculate_user_operation_hash(
        self, entry_point: ChecksumAddress, chain_id: int
    ) -> bytes:
        """
        Same hash as ``EntryPoint.getUserOpHash`` v0.7. ``signature`` is not part of it

        :param entry_point:
        :param chain_id:
        :return: UserOperation hash
        """
        user_operation_encoded = abi_encode(
            [
                "address",
                "uint256",
                "bytes32",
                "bytes32",
                "bytes32",
                "uint256",
                "bytes32",
                "bytes32",
            ],
            [
                fast_to_checksum_address(self.sender),
                self.nonce,
                fast_keccak(self.init_code),
                fast_keccak(HexBytes(self.call_data)),
                self.account_gas_limits,
                self.pre_verification_gas,
                self.gas_fees,
                fast_keccak(self.paymaster_and_data),
            ],
        )
        return fast_keccak(
            abi_encode(
                ["bytes32", "address", "uint256"],
                [
                    fast_keccak(user_operation_encoded),
                    fast_to_checksum_address(entry_point),
                    chain_id,
                ],
            )
        )


def pack_user_operation(user_operation: UserOperation) -> PackedUserOperation:
    return user_operation.pack()
