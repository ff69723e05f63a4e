"""
Address lookup table account decoding
"""

from solders.address_lookup_table_account import AddressLookupTable, AddressLookupTableAccount
from solders.pubkey import Pubkey

from ..errors import AccountNotFound


def decode_address_lookup_table(address: str, data: bytes) -> AddressLookupTableAccount:
    """
    Decode raw lookup table account data

    Raises:
        AccountNotFound: If the data is not an initialized lookup table
    """
    try:
        table = AddressLookupTable.deserialize(bytes(data))
    except ValueError as e:
        raise AccountNotFound.invalid_data(address, f"not a lookup table: {e}") from e

    return AddressLookupTableAccount(
        key=Pubkey.from_string(str(address)),
        addresses=list(table.addresses),
    )
