"""
Contract compilation, signers and deployment handles.

A thin layer over web3.py that gives deployment scripts a factory/handle
interface: compile a Vyper contract, deploy it from a signer, wait for it
to be mined and for further confirmations.
"""

import os
import time
from functools import lru_cache
from pathlib import Path

import vyper
from dotenv import load_dotenv
from web3 import Web3

load_dotenv()

CONTRACTS_DIR = Path(__file__).parent.parent / "contracts"

# Seconds between block number polls while waiting for confirmations
POLL_INTERVAL = 2


def compiler_version() -> str:
    """Vyper compiler version in explorer format, e.g. v0.4.3"""
    return "v" + vyper.__version__.split("+")[0]


@lru_cache(maxsize=None)
def compile_contract(name: str, contracts_dir: Path = CONTRACTS_DIR) -> dict:
    """Compile contracts/<name>.vy and return its ABI, bytecode and source."""
    contract_path = Path(contracts_dir) / f"{name}.vy"
    if not contract_path.exists():
        raise FileNotFoundError(f"Contract not found: {contract_path}")

    with open(contract_path) as f:
        source_code = f.read()

    compiled = vyper.compile_code(source_code, output_formats=["abi", "bytecode"])

    return {
        "name": name,
        "source": source_code,
        "abi": compiled["abi"],
        "bytecode": compiled["bytecode"],
        "compiler_version": compiler_version(),
    }


class Signer:
    """An account that can authorize transactions.

    With a private key, transactions are signed locally and sent raw.
    Without one, the address must be unlocked on the node.
    """

    def __init__(self, w3: Web3, address: str, private_key: str = None):
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)
        self.private_key = private_key

    def get_balance(self) -> int:
        """Balance in wei"""
        return self.w3.eth.get_balance(self.address)

    def send_transaction(self, tx: dict):
        if self.private_key is None:
            return self.w3.eth.send_transaction(tx)

        tx = dict(tx)
        tx.setdefault("nonce", self.w3.eth.get_transaction_count(self.address))
        tx.setdefault("chainId", self.w3.eth.chain_id)
        signed_tx = self.w3.eth.account.sign_transaction(tx, self.private_key)
        return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

    def __repr__(self):
        return f"<Signer {self.address}>"


def get_signers(w3: Web3) -> list:
    """Signers available for deployment.

    DEPLOYER_PRIVATE_KEY takes precedence; otherwise the node's unlocked
    accounts are used.
    """
    private_key = os.getenv("DEPLOYER_PRIVATE_KEY")
    if private_key:
        account = w3.eth.account.from_key(private_key)
        return [Signer(w3, account.address, private_key)]

    accounts = w3.eth.accounts
    if not accounts:
        raise RuntimeError("No signers available. Set DEPLOYER_PRIVATE_KEY in your environment")

    return [Signer(w3, address) for address in accounts]


class DeployTransaction:
    """The creation transaction of a deployed contract"""

    def __init__(self, w3: Web3, tx_hash, gas_limit: int = None):
        self.w3 = w3
        self.hash = Web3.to_hex(tx_hash)
        self.gas_limit = gas_limit
        self.block_number = None
        self.receipt = None

    def wait(self, confirmations: int = 1):
        """Block until the transaction has the given number of confirmations.

        The block that includes the transaction counts as the first one.
        """
        if self.receipt is None:
            self.receipt = self.w3.eth.wait_for_transaction_receipt(self.hash)
            self.block_number = self.receipt.blockNumber

        target_block = self.block_number + max(confirmations, 1) - 1
        while self.w3.eth.block_number < target_block:
            time.sleep(POLL_INTERVAL)

        return self.receipt


class DeployedContract:
    """Handle for a contract deployment, usable once mined"""

    def __init__(self, factory, deploy_transaction: DeployTransaction):
        self.factory = factory
        self.deploy_transaction = deploy_transaction
        self.address = None
        self.contract = None

    def deployed(self):
        """Wait for the creation transaction to be mined."""
        receipt = self.deploy_transaction.wait(1)
        if receipt.status != 1:
            raise RuntimeError(f"Deployment failed: {self.factory.name} (tx {self.deploy_transaction.hash})")

        self.address = receipt.contractAddress
        self.contract = self.factory.w3.eth.contract(address=self.address, abi=self.factory.abi)
        return self


class ContractFactory:
    """Deploys new instances of a compiled contract from a signer"""

    def __init__(self, w3: Web3, compiled: dict, signer: Signer):
        self.w3 = w3
        self.name = compiled["name"]
        self.abi = compiled["abi"]
        self.bytecode = compiled["bytecode"]
        self.signer = signer

    def deploy(self, *args) -> DeployedContract:
        """Submit the creation transaction. Call deployed() on the result to wait for it."""
        contract = self.w3.eth.contract(abi=self.abi, bytecode=self.bytecode)
        tx = contract.constructor(*args).build_transaction({"from": self.signer.address})

        tx_hash = self.signer.send_transaction(tx)

        return DeployedContract(self, DeployTransaction(self.w3, tx_hash, gas_limit=tx.get("gas")))


def get_contract_factory(w3: Web3, name: str, signer: Signer) -> ContractFactory:
    return ContractFactory(w3, compile_contract(name), signer)
