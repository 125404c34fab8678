"""
Subnet planning for VPC CIDR blocks.

Derives equal-sized, non-overlapping subnet blocks from a base CIDR using
integer arithmetic only, so the same inputs always produce the same layout:

  parse_cidr("10.2.0.0/24")               -> CidrBlock(10.2.0.0, 24)
  determine_subnet_prefix(24, 2)          -> 26
  derive_subnet_cidr("10.2.0.0/24", 26, 1) -> "10.2.0.64/26"

Subnets are never larger than a /26 (SUBNET_PREFIX_FLOOR) and never smaller
than a /28, the smallest subnet AWS accepts.
"""

import ipaddress
from dataclasses import dataclass

from IAC.utils.exceptions import (
    CidrError,
    InsufficientAddressSpace,
    InvalidCidrFormat,
    SubnetCapacityExceeded,
    SubnetPrefixTooSmall,
)

# Conventional subnet size; tunable, not an AWS requirement
SUBNET_PREFIX_FLOOR = 26

# AWS minimum subnet size (/28 = 16 addresses)
MIN_SUBNET_PREFIX_LIMIT = 28

_ADDRESS_BITS = 32


@dataclass(frozen=True)
class CidrBlock:
    """
    IPv4 address range in CIDR form.

    Attributes:
        base_address: Address as a 32-bit unsigned integer (as written, not aligned)
        prefix: Prefix length (0-32)
    """
    base_address: int
    prefix: int

    @property
    def size(self) -> int:
        """Number of addresses in the block."""
        return 1 << (_ADDRESS_BITS - self.prefix)

    @property
    def network_address(self) -> int:
        """Base address aligned down to the prefix boundary."""
        return (self.base_address // self.size) * self.size

    @property
    def last_address(self) -> int:
        return self.network_address + self.size - 1

    def contains(self, other: "CidrBlock") -> bool:
        """Check whether another block lies entirely within this one."""
        return (
            self.network_address <= other.network_address
            and other.last_address <= self.last_address
        )

    def overlaps(self, other: "CidrBlock") -> bool:
        """Check whether two blocks share any address."""
        return (
            self.network_address <= other.last_address
            and other.network_address <= self.last_address
        )

    def __str__(self) -> str:
        return f"{ipaddress.IPv4Address(self.base_address)}/{self.prefix}"


@dataclass(frozen=True)
class SubnetPlan:
    """Ordered subnet blocks carved from a parent block at one prefix length."""
    parent: CidrBlock
    prefix: int
    blocks: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.blocks)

    def __getitem__(self, index: int) -> str:
        return self.blocks[index]


def _parse_int(text: str, low: int, high: int, value: str, what: str) -> int:
    if not text.isdigit() or not text.isascii():
        raise InvalidCidrFormat(value, f"{what} {text!r} is not a decimal number")
    number = int(text)
    if not low <= number <= high:
        raise InvalidCidrFormat(value, f"{what} {number} is outside {low}-{high}")
    return number


def parse_cidr(cidr: str) -> CidrBlock:
    """
    Parse an "A.B.C.D/N" string.

    Args:
        cidr: CIDR string, e.g. "10.0.0.0/24"

    Returns:
        CidrBlock with the address as written and its prefix length

    Raises:
        InvalidCidrFormat: If the octets or prefix are missing or out of range
    """
    if not isinstance(cidr, str):
        raise InvalidCidrFormat(cidr, "expected a string")

    address_part, sep, prefix_part = cidr.strip().partition("/")
    if not sep:
        raise InvalidCidrFormat(cidr, "missing '/<prefix>'")

    octets = address_part.split(".")
    if len(octets) != 4:
        raise InvalidCidrFormat(cidr, f"expected 4 octets, got {len(octets)}")

    address = 0
    for octet in octets:
        address = (address << 8) | _parse_int(octet, 0, 255, cidr, "octet")

    prefix = _parse_int(prefix_part, 0, _ADDRESS_BITS, cidr, "prefix")
    return CidrBlock(base_address=address, prefix=prefix)


def determine_subnet_prefix(base_prefix: int, subnet_count: int) -> int:
    """
    Pick the prefix length for `subnet_count` equal subnets of a /base_prefix block.

    Uses ceil(log2(subnet_count)) extra bits, but never returns a block larger
    than SUBNET_PREFIX_FLOOR.

    Raises:
        InsufficientAddressSpace: If the subnets would be smaller than a /28
        CidrError: If base_prefix or subnet_count is out of range
    """
    if not 0 <= base_prefix <= _ADDRESS_BITS:
        raise InvalidCidrFormat(base_prefix, f"prefix must be within 0-{_ADDRESS_BITS}")
    if subnet_count < 1:
        raise CidrError(
            f"Subnet count must be at least 1, got {subnet_count}",
            {"subnet_count": subnet_count},
        )

    # (n - 1).bit_length() == ceil(log2(n)) for n >= 1
    extra_bits = (subnet_count - 1).bit_length()
    subnet_prefix = max(SUBNET_PREFIX_FLOOR, base_prefix + extra_bits)

    if subnet_prefix > MIN_SUBNET_PREFIX_LIMIT:
        raise InsufficientAddressSpace(
            base_prefix, subnet_count, subnet_prefix, MIN_SUBNET_PREFIX_LIMIT
        )
    return subnet_prefix


def derive_subnet_cidr(base_cidr: str, subnet_prefix: int, subnet_index: int) -> str:
    """
    Compute the `subnet_index`-th /subnet_prefix block inside `base_cidr`.

    Args:
        base_cidr: Parent block, e.g. "10.2.0.0/24"
        subnet_prefix: Prefix length of each child block
        subnet_index: 0-based child index

    Returns:
        Child block as "A.B.C.D/subnet_prefix"

    Raises:
        InvalidCidrFormat: If base_cidr or subnet_prefix is malformed
        SubnetPrefixTooSmall: If subnet_prefix < parent prefix
        SubnetCapacityExceeded: If subnet_index is outside the parent
    """
    parent = parse_cidr(base_cidr)

    if not 0 <= subnet_prefix <= _ADDRESS_BITS:
        raise InvalidCidrFormat(subnet_prefix, f"prefix must be within 0-{_ADDRESS_BITS}")
    if subnet_prefix < parent.prefix:
        raise SubnetPrefixTooSmall(parent.prefix, subnet_prefix)

    capacity = 1 << (subnet_prefix - parent.prefix)
    if not 0 <= subnet_index < capacity:
        raise SubnetCapacityExceeded(subnet_index, capacity, subnet_prefix)

    child_size = 1 << (_ADDRESS_BITS - subnet_prefix)
    child = CidrBlock(
        base_address=parent.network_address + subnet_index * child_size,
        prefix=subnet_prefix,
    )
    return str(child)


def plan_subnets(base_cidr: str, subnet_count: int) -> SubnetPlan:
    """
    Derive `subnet_count` subnets of base_cidr, ordered by index.

    Raises:
        CidrError: Any error from parsing, sizing or derivation
    """
    parent = parse_cidr(base_cidr)
    prefix = determine_subnet_prefix(parent.prefix, subnet_count)
    blocks = tuple(
        derive_subnet_cidr(base_cidr, prefix, index) for index in range(subnet_count)
    )
    return SubnetPlan(parent=parent, prefix=prefix, blocks=blocks)
