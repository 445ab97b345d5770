import pytest

from api._shared import Config
from api.contract import ContractReadError, ProphecyNotFound, ProphecyRecord, TokenNotMinted

OWNER = '0x1111111111111111111111111111111111111111'


class FakeReader:
    """In-memory ContractReader that records every call."""

    def __init__(self, prophecies=None, owners=None, prophecy_error=None, owner_error=None):
        self.prophecies = prophecies or {}
        self.owners = owners or {}
        self.prophecy_error = prophecy_error
        self.owner_error = owner_error
        self.calls = []

    def get_prophecy(self, token_id):
        self.calls.append(('get_prophecy', token_id))
        if self.prophecy_error is not None:
            raise self.prophecy_error
        if token_id not in self.prophecies:
            raise ProphecyNotFound(f'no prophecy {token_id}')
        return ProphecyRecord(*self.prophecies[token_id])

    def get_owner(self, token_id):
        self.calls.append(('get_owner', token_id))
        if self.owner_error is not None:
            raise self.owner_error
        if token_id not in self.owners:
            raise TokenNotMinted(f'no owner {token_id}')
        return self.owners[token_id]


@pytest.fixture
def config():
    return Config(
        rpc_url='http://rpc.invalid',
        contract_address='0x2222222222222222222222222222222222222222',
        base_url='https://nft.example.com',
    )


@pytest.fixture
def reader():
    return FakeReader(
        prophecies={7: ('Will it rain?', 'Yes', 1700000000)},
        owners={7: OWNER},
    )


@pytest.fixture
def transport_error():
    return ContractReadError('connection refused')
