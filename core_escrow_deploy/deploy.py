#!/usr/bin/env python3
"""
Project Escrow Deployment Script
Deploys the Project escrow contract to Core Testnet 2 and records the result

Usage:
    python -m core_escrow_deploy.deploy [network]

Environment variables:
    DEPLOYER_PRIVATE_KEY - Private key for deployment (unlocked node accounts otherwise)
    CORE_SCAN_API_KEY - Enables source verification on the block explorer
"""

import json
import os
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv
from web3 import Web3

from core_escrow_deploy.contracts import get_contract_factory, get_signers
from core_escrow_deploy.networks import DEFAULT_NETWORK, connect, get_explorer_url, load_network_config
from core_escrow_deploy.verify_on_explorer import verify

load_dotenv()

CONTRACT_NAME = "Project"
DEPLOYMENT_FILE = "deployment-info.json"
API_KEY_ENV = "CORE_SCAN_API_KEY"
VERIFY_CONFIRMATIONS = 6


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2024-01-01T00:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_deployment_record(network: str, net_config: dict, deployer, contract) -> dict:
    """Summary of a finished deployment, in the deployment-info.json layout"""
    record = {
        "network": network,
        "contractAddress": contract.address,
        "deployerAddress": deployer.address,
        "transactionHash": contract.deploy_transaction.hash,
        "blockNumber": contract.deploy_transaction.block_number,
        "timestamp": utc_timestamp(),
        "explorerUrl": get_explorer_url(net_config, contract.address),
    }
    # Unknown values are left out rather than written as null
    return {key: value for key, value in record.items() if value is not None}


def save_deployment_info(record: dict, path: str = DEPLOYMENT_FILE) -> str:
    with open(path, "w", encoding="utf-8") as f:
        f.write(json.dumps(record, indent=2))
    return path


def wait_and_verify(network: str, net_config: dict, contract):
    """Wait for confirmations, then submit the source.

    A failed wait propagates; a failed verification is only reported.
    """
    print("⏳ Waiting for block confirmations...")
    contract.deploy_transaction.wait(VERIFY_CONFIRMATIONS)

    print(f"🔍 Verifying contract on {net_config['name']} explorer...")
    try:
        verify(network, contract.address, constructor_arguments=[], contract_name=CONTRACT_NAME)
        print("✅ Contract verified successfully!")
    except Exception as e:
        print(f"❌ Error verifying contract: {e}")


def deploy(w3: Web3, network: str = DEFAULT_NETWORK, net_config: dict = None) -> dict:
    """Deploy the Project contract and write deployment-info.json."""
    if net_config is None:
        net_config = load_network_config(network)
    currency = net_config.get("native_currency", "ETH")

    print(f"🚀 Starting deployment to {net_config['name']}...")

    signers = get_signers(w3)
    deployer = signers[0]

    print(f"📝 Deploying contracts with the account: {deployer.address}")
    balance = deployer.get_balance()
    print(f"💰 Account balance: {balance} wei ({w3.from_wei(balance, 'ether')} {currency})")

    factory = get_contract_factory(w3, CONTRACT_NAME, deployer)

    print("⏳ Deploying Escrow Contract...")
    contract = factory.deploy()
    contract.deployed()

    gas_limit = contract.deploy_transaction.gas_limit
    print("✅ Escrow Contract deployed successfully!")
    print(f"📍 Contract address: {contract.address}")
    print(f"🔗 Transaction hash: {contract.deploy_transaction.hash}")
    print(f"⛽ Gas limit: {gas_limit if gas_limit is not None else 'n/a'}")

    if os.getenv(API_KEY_ENV):
        wait_and_verify(network, net_config, contract)

    record = build_deployment_record(network, net_config, deployer, contract)

    print("\n📋 Deployment Summary:")
    print("=" * 50)
    print(f"Contract Name: Escrow Contract")
    print(f"Network: {net_config['name']}")
    print(f"Deployer: {deployer.address}")
    print(f"Contract Address: {contract.address}")
    if "explorerUrl" in record:
        print(f"Explorer URL: {record['explorerUrl']}")
    print("=" * 50)

    save_deployment_info(record)
    print(f"💾 Deployment info saved to {DEPLOYMENT_FILE}")

    return record


def main():
    """Main deployment function."""
    network = sys.argv[1].lower() if len(sys.argv) > 1 else DEFAULT_NETWORK

    try:
        net_config = load_network_config(network)
        w3 = connect(network)
        deploy(w3, network, net_config)
    except Exception as e:
        print(f"❌ Deployment failed: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
