"""
Shared pytest fixtures for Project deployment testing.

Provides an in-memory chain, the compiled Project contract, a deployed
instance, and helpers for running the deployment scripts in isolation.
"""

import time

import pytest
import requests
from eth_tester import EthereumTester, PyEVMBackend
from eth_tester.exceptions import TransactionFailed
from web3 import Web3
from web3.exceptions import ContractLogicError
from web3.providers.eth_tester import EthereumTesterProvider

from core_escrow_deploy.contracts import compile_contract

# Reverts surface from eth-tester on send, or from web3 during gas estimation
REVERT_ERRORS = (TransactionFailed, ContractLogicError)

ONE_ETHER = 10**18


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep credentials from a developer .env out of every test"""
    monkeypatch.delenv("DEPLOYER_PRIVATE_KEY", raising=False)
    monkeypatch.delenv("CORE_SCAN_API_KEY", raising=False)
    monkeypatch.delenv("CORE_TESTNET2_RPC_URL", raising=False)


@pytest.fixture(scope="session")
def compiled_contract():
    """Compile Project.vy once per test session"""
    return compile_contract("Project")


@pytest.fixture
def eth_tester():
    """Create a fresh EthereumTester for each test"""
    return EthereumTester(backend=PyEVMBackend())


@pytest.fixture
def w3(eth_tester):
    """Create Web3 instance connected to EthereumTester"""
    return Web3(EthereumTesterProvider(eth_tester))


@pytest.fixture
def accounts(w3):
    """Get test accounts from Web3"""
    return w3.eth.accounts


@pytest.fixture
def owner(accounts):
    """Owner account (deployer)"""
    return accounts[0]


@pytest.fixture
def client(accounts):
    """Client funding escrows"""
    return accounts[1]


@pytest.fixture
def freelancer(accounts):
    """Freelancer receiving released funds"""
    return accounts[2]


@pytest.fixture
def outsider(accounts):
    """Account with no part in any escrow"""
    return accounts[3]


@pytest.fixture
def contract(w3, compiled_contract, owner):
    """Deploy a fresh contract instance for each test"""
    Contract = w3.eth.contract(abi=compiled_contract["abi"], bytecode=compiled_contract["bytecode"])
    tx_hash = Contract.constructor().transact({"from": owner})
    tx_receipt = w3.eth.wait_for_transaction_receipt(tx_hash)
    return w3.eth.contract(address=tx_receipt.contractAddress, abi=compiled_contract["abi"])


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run from an empty directory so deployment-info.json lands in tmp"""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mine_on_sleep(w3, monkeypatch):
    """Mine a block whenever code sleeps while polling the chain"""
    monkeypatch.setattr(time, "sleep", lambda seconds: w3.testing.mine())


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


class FakeResponse:
    """Stand-in for requests.Response returned by the explorer API"""

    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self.payload


@pytest.fixture
def fake_response():
    return FakeResponse
