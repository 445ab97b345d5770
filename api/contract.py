"""
Read-only binding to the prophecy contract.

Handlers depend on the small `ContractReader` capability below; production
uses `Web3ContractReader`, tests substitute an in-memory fake.

Error convention:
- a revert, or the contract's default value for an unwritten slot, means
  "not found" (`ProphecyNotFound` / `TokenNotMinted`);
- anything else (connection failure, JSON-RPC error, undecodable output)
  is a `ContractReadError`.
"""
from typing import NamedTuple, Protocol

import requests
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception

from api._shared import Config, logger

ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'

CONTRACT_ABI = [
    {
        "name": "prophecies",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "uint256"}],
        "outputs": [
            {"name": "question", "type": "string"},
            {"name": "answer", "type": "string"},
            {"name": "timestamp", "type": "uint256"},
        ],
    },
    {
        "name": "ownerOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
]


class ContractError(Exception):
    """Base class for contract read failures."""


class ProphecyNotFound(ContractError):
    """No prophecy has been recorded for the token id."""


class TokenNotMinted(ContractError):
    """The prophecy exists but the token has no owner yet."""


class ContractReadError(ContractError):
    """The remote call itself failed."""


class ProphecyRecord(NamedTuple):
    question: str
    answer: str
    timestamp: int

    @property
    def is_empty(self) -> bool:
        return not self.question and not self.answer and not self.timestamp


class ContractReader(Protocol):
    def get_prophecy(self, token_id: int) -> ProphecyRecord: ...

    def get_owner(self, token_id: int) -> str: ...


class Web3ContractReader:
    """`ContractReader` over a web3.py HTTP provider. One round trip per call."""

    def __init__(self, rpc_url: str, contract_address: str):
        if not contract_address:
            raise ContractReadError('CONTRACT_ADDRESS is not configured')
        if not Web3.is_address(contract_address):
            raise ContractReadError(f'Invalid contract address: {contract_address!r}')
        # No retries: each lookup is a single eth_call.
        self._w3 = Web3(Web3.HTTPProvider(rpc_url, exception_retry_configuration=None))
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=CONTRACT_ABI,
        )

    @classmethod
    def from_config(cls, config: Config) -> 'Web3ContractReader':
        return cls(config.rpc_url, config.contract_address)

    def get_prophecy(self, token_id: int) -> ProphecyRecord:
        try:
            question, answer, timestamp = self._contract.functions.prophecies(token_id).call()
        except ContractLogicError as e:
            raise ProphecyNotFound(str(e)) from e
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise ContractReadError(str(e)) from e
        record = ProphecyRecord(question or '', answer or '', int(timestamp or 0))
        if record.is_empty:
            raise ProphecyNotFound(f'No prophecy recorded for token {token_id}')
        return record

    def get_owner(self, token_id: int) -> str:
        try:
            owner = self._contract.functions.ownerOf(token_id).call()
        except ContractLogicError as e:
            raise TokenNotMinted(str(e)) from e
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise ContractReadError(str(e)) from e
        if not owner or owner == ZERO_ADDRESS:
            raise TokenNotMinted(f'Token {token_id} has no owner')
        logger.debug("ownerOf(%s) -> %s", token_id, owner)
        return owner
