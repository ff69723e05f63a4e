"""
Typed handle for the Autocrat program

Binds the IDL schema artifact to a program address and a provider. The
handle builds instructions with accounts ordered and flagged as the IDL
declares them, and fetches/decodes program accounts.

Usage:
    program = Program(load_idl(), AUTOCRAT_PROGRAM_ID, provider)

    ix = program.instruction(
        "finalize_proposal",
        {"proposal": proposal, "instructions": ..., ...},
    )
    dao = await program.account.dao.fetch(dao_address)
"""

from __future__ import annotations

import base64
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union, TYPE_CHECKING

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .coder import IdlCoder, snake_case
from .constants import _anchor_discriminator, _anchor_account_discriminator
from .errors import AccountNotFound, IdlError
from .types import to_pubkey

if TYPE_CHECKING:
    from .provider import Provider

logger = logging.getLogger(__name__)

IDL_PATH = Path(__file__).parent / "idl" / "autocrat.json"


@lru_cache(maxsize=None)
def load_idl(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load an IDL JSON file (the packaged autocrat IDL by default)

    Results are cached per path; treat the returned dict as read-only.
    """
    idl_path = Path(path) if path else IDL_PATH
    with open(idl_path, "r", encoding="utf-8") as f:
        return json.load(f)


def custom_error_code(err: Any) -> Optional[int]:
    """
    Custom program error code from an RPC transaction error value

    {"InstructionError": [0, {"Custom": 6000}]} -> 6000; anything else -> None
    """
    if not isinstance(err, Mapping):
        return None
    failure = err.get("InstructionError")
    if not isinstance(failure, (list, tuple)) or len(failure) != 2:
        return None
    detail = failure[1]
    if isinstance(detail, Mapping) and isinstance(detail.get("Custom"), int):
        return detail["Custom"]
    return None


class AccountClient:
    """Fetches and decodes one account type declared in the IDL"""

    def __init__(self, program: "Program", idl_account: Mapping[str, Any]):
        self._program = program
        self.name: str = idl_account["name"]
        self.discriminator: bytes = _anchor_account_discriminator(self.name)

    def decode(self, data: bytes, address: Optional[str] = None) -> Dict[str, Any]:
        """Decode raw account data (discriminator included)"""
        if data[:8] != self.discriminator:
            raise AccountNotFound.invalid_data(
                str(address), f"discriminator does not match {self.name}"
            )
        value, _ = self._program.coder.decode({"defined": self.name}, data, 8)
        return value

    async def fetch_nullable(self, address: Union[str, Pubkey]) -> Optional[Dict[str, Any]]:
        """Fetch and decode the account, or None if it does not exist"""
        info = await self._program.provider.connection.get_account_info(str(address))
        if info is None:
            return None
        data = base64.b64decode(info["data"][0])
        return self.decode(data, str(address))

    async def fetch(self, address: Union[str, Pubkey]) -> Dict[str, Any]:
        """
        Fetch and decode the account

        Raises:
            AccountNotFound: If the account does not exist
        """
        account = await self.fetch_nullable(address)
        if account is None:
            raise AccountNotFound.account(str(address), self.name)
        return account


class AccountNamespace:
    """Attribute access to account clients: program.account.dao"""

    def __init__(self, program: "Program", idl_accounts: Sequence[Mapping[str, Any]]):
        self._clients = {
            snake_case(idl_account["name"]): AccountClient(program, idl_account)
            for idl_account in idl_accounts
        }

    def __getattr__(self, name: str) -> AccountClient:
        try:
            return self._clients[name]
        except KeyError:
            raise AttributeError(f"IDL has no account type '{name}'") from None

    def __getitem__(self, name: str) -> AccountClient:
        try:
            return self._clients[snake_case(name)]
        except KeyError:
            raise IdlError.unknown_account(name) from None

    def __iter__(self):
        return iter(self._clients)


class Program:
    """
    Typed program handle

    Attributes:
        idl: Parsed IDL
        program_id: Program address
        provider: Connection/signing context (shared, never mutated here)
        coder: IDL coder for args and accounts
        account: Namespace of account clients keyed by snake_case name
    """

    def __init__(
        self,
        idl: Mapping[str, Any],
        program_id: Union[str, Pubkey],
        provider: "Provider",
    ):
        self._idl = idl
        self._program_id = to_pubkey(program_id)
        self._provider = provider
        self._coder = IdlCoder(idl)
        self._instructions = {
            snake_case(ix["name"]): ix for ix in idl.get("instructions", [])
        }
        self._errors = {err["code"]: err for err in idl.get("errors", [])}
        self.account = AccountNamespace(self, idl.get("accounts", []))

    @property
    def idl(self) -> Mapping[str, Any]:
        return self._idl

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    @property
    def provider(self) -> "Provider":
        return self._provider

    @property
    def coder(self) -> IdlCoder:
        return self._coder

    def instruction_discriminator(self, name: str) -> bytes:
        """8-byte Anchor discriminator for an instruction (snake_case name)"""
        self._idl_instruction(name)
        return _anchor_discriminator(name)

    def error_message(self, code: int) -> Optional[str]:
        """Look up a custom program error by its numeric code"""
        err = self._errors.get(code)
        return f"{err['name']}: {err['msg']}" if err else None

    def describe_error(self, err: Any) -> Optional[str]:
        """IDL message for a custom program error in an RPC error value, if any"""
        code = custom_error_code(err)
        return None if code is None else self.error_message(code)

    def _idl_instruction(self, name: str) -> Mapping[str, Any]:
        try:
            return self._instructions[name]
        except KeyError:
            raise IdlError.unknown_instruction(name) from None

    def instruction(
        self,
        name: str,
        accounts: Mapping[str, Union[str, Pubkey]],
        *args: Any,
        remaining_accounts: Optional[Sequence[AccountMeta]] = None,
    ) -> Instruction:
        """
        Build an instruction

        Args:
            name: Instruction name in snake_case (e.g. "finalize_proposal")
            accounts: Account addresses keyed by snake_case account name
            *args: Instruction arguments in IDL order
            remaining_accounts: Extra accounts appended after the IDL accounts

        Returns:
            solders Instruction

        Raises:
            IdlError: Unknown instruction, missing account or bad argument
        """
        idl_ix = self._idl_instruction(name)

        idl_args = idl_ix.get("args", [])
        if len(args) != len(idl_args):
            raise IdlError.invalid_value(
                name, f"expected {len(idl_args)} args, got {len(args)}"
            )

        data = bytearray(_anchor_discriminator(name))
        for arg_def, value in zip(idl_args, args):
            data.extend(self._coder.encode(arg_def["type"], value))

        metas: List[AccountMeta] = []
        for acc in idl_ix["accounts"]:
            key = snake_case(acc["name"])
            if key not in accounts:
                raise IdlError.missing_account(name, key)
            metas.append(
                AccountMeta(
                    to_pubkey(accounts[key]),
                    is_signer=acc["isSigner"],
                    is_writable=acc["isMut"],
                )
            )
        if remaining_accounts:
            metas.extend(remaining_accounts)

        logger.debug(f"Built {name} instruction with {len(metas)} accounts, {len(data)} data bytes")
        return Instruction(self._program_id, bytes(data), metas)

    def __repr__(self) -> str:
        return f"Program({self._idl.get('name', '?')}, {self._program_id})"
