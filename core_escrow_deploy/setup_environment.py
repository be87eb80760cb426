#!/usr/bin/env python3
"""
Deployment Environment Check

Validates environment configuration and tests network connectivity.
Run this before deploying to ensure everything is configured correctly.

Usage:
    python -m core_escrow_deploy.setup_environment [network]
"""

import os
import re
import sys
from pathlib import Path

from dotenv import load_dotenv

from core_escrow_deploy.contracts import compile_contract, get_signers
from core_escrow_deploy.networks import DEFAULT_NETWORK, connect, load_network_config

# Load environment variables
load_dotenv()

PRIVATE_KEY_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


def check_env_file():
    """Check if .env file exists"""
    env_path = Path(".env")
    if not env_path.exists():
        print("[WARN] .env file not found")
        print("       Create a .env file with:")
        print("       DEPLOYER_PRIVATE_KEY=your_private_key")
        print("       CORE_SCAN_API_KEY=your_core_scan_api_key")
        return False
    print("[OK] .env file found")
    return True


def check_private_key():
    """Check if deployer private key is configured"""
    private_key = os.getenv("DEPLOYER_PRIVATE_KEY")
    if not private_key:
        print("[WARN] DEPLOYER_PRIVATE_KEY not set")
        print("       Required for testnet/mainnet deployments")
        return False

    if not PRIVATE_KEY_PATTERN.match(private_key):
        print("[ERROR] DEPLOYER_PRIVATE_KEY must be 64 hex characters (optionally 0x-prefixed)")
        return False

    print("[OK] DEPLOYER_PRIVATE_KEY is configured")
    return True


def check_api_key():
    """Check if the explorer API key is configured (optional)"""
    if not os.getenv("CORE_SCAN_API_KEY"):
        print("[WARN] CORE_SCAN_API_KEY not set - contract verification will be skipped")
        print("       Get a key at: https://scan.test2.btcs.network")
        return True

    print("[OK] CORE_SCAN_API_KEY is configured")
    return True


def check_contract_compilation(contract_name: str = "Project"):
    """Verify contract compiles successfully"""
    print("Compiling contract...")

    try:
        compiled = compile_contract(contract_name)
    except FileNotFoundError as e:
        print(f"[ERROR] {e}")
        return False
    except Exception as e:
        print(f"[ERROR] Compilation failed: {e}")
        return False

    bytecode_size = len(compiled["bytecode"]) // 2 - 1
    func_count = len([x for x in compiled["abi"] if x["type"] == "function"])

    print(f"[OK] Contract compiles successfully")
    print(f"     Bytecode size: {bytecode_size:,} bytes")
    print(f"     Functions: {func_count}")
    return True


def check_network_connectivity(network: str = DEFAULT_NETWORK):
    """Test network connectivity"""
    try:
        net_config = load_network_config(network)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return None

    print(f"Testing connection to {net_config['name']}...")

    try:
        w3 = connect(network)
    except ConnectionError as e:
        print(f"[ERROR] {e}")
        return None

    chain_id = w3.eth.chain_id
    print(f"[OK] Connected to {net_config['name']}")
    print(f"     Chain ID: {chain_id}")
    print(f"     Block: {w3.eth.block_number:,}")

    if chain_id != net_config["chain_id"]:
        print(f"[WARN] Expected chain ID {net_config['chain_id']}")

    return w3


def check_deployer_balance(w3, network: str = DEFAULT_NETWORK):
    """Check deployer account balance"""
    net_config = load_network_config(network)

    try:
        deployer = get_signers(w3)[0]
    except RuntimeError as e:
        print(f"[WARN] Cannot check balance - {e}")
        return False

    balance_eth = w3.from_wei(deployer.get_balance(), "ether")
    currency = net_config.get("native_currency", "ETH")
    print(f"Deployer: {deployer.address}")
    print(f"Balance: {balance_eth:.6f} {currency}")

    # Minimum recommended balance for deployment
    min_balance = 0.01 if net_config.get("is_testnet") else 0.1

    if balance_eth < min_balance:
        print(f"[WARN] Low balance! Recommended minimum: {min_balance} {currency}")
        if "faucets" in net_config:
            print("       Get testnet funds from:")
            for faucet in net_config["faucets"]:
                print(f"       - {faucet}")
        return False

    print(f"[OK] Sufficient balance for deployment")
    return True


def main():
    """Run all environment checks"""
    print("=" * 50)
    print("Deployment Environment Check")
    print("=" * 50)
    print()

    network = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_NETWORK

    results = {
        "env_file": check_env_file(),
        "contract": check_contract_compilation(),
    }

    print()

    if network != "local":
        results["private_key"] = check_private_key()
    results["api_key"] = check_api_key()

    print()
    w3 = check_network_connectivity(network)
    results["connectivity"] = w3 is not None

    if w3 is not None:
        print()
        results["balance"] = check_deployer_balance(w3, network)

    # Summary
    print()
    print("=" * 50)
    print("Summary")
    print("=" * 50)

    all_ok = all(results.values())
    for check, passed in results.items():
        status = "[OK]" if passed else "[FAIL]"
        print(f"  {status} {check}")

    print()
    if all_ok:
        print("Environment is ready for deployment!")
        print(f"Run: python -m core_escrow_deploy.deploy {network}")
    else:
        print("Some checks failed. Please fix the issues above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
