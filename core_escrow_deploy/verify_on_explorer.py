#!/usr/bin/env python3
"""
Contract Verification Script for Core Block Explorers

Submits the Vyper Project contract for source verification on Core Scan
(Etherscan-compatible API). Used by the deploy script after confirmations,
or standalone to re-verify the address recorded in deployment-info.json.

Usage:
    python -m core_escrow_deploy.verify_on_explorer [network]
    python -m core_escrow_deploy.verify_on_explorer core_testnet2
"""

import json
import os
import sys
import time
from pathlib import Path

import eth_abi
import requests
from dotenv import load_dotenv

from core_escrow_deploy.contracts import compile_contract
from core_escrow_deploy.networks import DEFAULT_NETWORK

load_dotenv()

# Block explorer API configurations
EXPLORER_APIS = {
    "core_testnet2": {
        "name": "Core Scan Testnet 2",
        "api_url": "https://api.test2.btcs.network/api",
        "explorer_url": "https://scan.test2.btcs.network",
        "api_key_env": "CORE_SCAN_API_KEY",
    },
    "core_mainnet": {
        "name": "Core Scan",
        "api_url": "https://openapi.coredao.org/api",
        "explorer_url": "https://scan.coredao.org",
        "api_key_env": "CORE_SCAN_API_KEY",
    },
}

DEPLOYMENT_FILE = "deployment-info.json"
DEFAULT_CONTRACT = "Project"

# Seconds between checkverifystatus polls
STATUS_POLL_INTERVAL = 5


def encode_constructor_arguments(abi: list, constructor_arguments) -> str:
    """ABI-encode constructor arguments as unprefixed hex, as explorers expect."""
    constructor_arguments = list(constructor_arguments)
    if not constructor_arguments:
        return ""

    constructor = next((item for item in abi if item["type"] == "constructor"), None)
    if constructor is None:
        raise ValueError("Constructor arguments given but the contract has no constructor inputs")

    types = [inp["type"] for inp in constructor["inputs"]]
    if len(types) != len(constructor_arguments):
        raise ValueError(
            f"Constructor expects {len(types)} arguments, got {len(constructor_arguments)}"
        )

    return eth_abi.encode(types, constructor_arguments).hex()


def load_deployment_info(path: str = DEPLOYMENT_FILE) -> dict:
    """Load deployment information written by the deploy script."""
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"No deployment file found: {filepath}")

    with open(filepath) as f:
        return json.load(f)


def submit_verification(
    network: str,
    contract_address: str,
    source_code: str,
    contract_name: str = DEFAULT_CONTRACT,
    compiler_version: str = "v0.4.3",
    constructor_arguments: str = "",
) -> str:
    """Submit contract for verification."""
    config = EXPLORER_APIS.get(network)
    if not config:
        raise ValueError(f"Unsupported network: {network}. Supported: {list(EXPLORER_APIS.keys())}")

    api_key = os.getenv(config["api_key_env"])
    if not api_key:
        raise ValueError(f"Missing API key. Set {config['api_key_env']} environment variable.")

    print(f"[*] Submitting verification to {config['name']}...")
    print(f"    Contract: {contract_address}")
    print(f"    Compiler: Vyper {compiler_version}")

    data = {
        "apikey": api_key,
        "module": "contract",
        "action": "verifysourcecode",
        "contractaddress": contract_address,
        "sourceCode": source_code,
        "codeformat": "vyper-single-file",
        "contractname": contract_name,
        "compilerversion": compiler_version,
        "optimizationUsed": "0",
        "runs": "0",
        "constructorArguements": constructor_arguments,  # Note: Etherscan has a typo in their API
        "evmversion": "cancun",
        "licenseType": "3",  # MIT License
    }

    try:
        response = requests.post(config["api_url"], data=data, timeout=60)
        response.raise_for_status()
        result = response.json()
    except requests.RequestException as e:
        raise RuntimeError(f"API request failed: {e}")

    if result.get("status") == "1":
        guid = result.get("result")
        print(f"[+] Verification submitted successfully!")
        print(f"    GUID: {guid}")
        return guid

    error_msg = result.get("result", "Unknown error")

    if "already verified" in error_msg.lower():
        print(f"[*] Contract is already verified!")
        return None
    elif "unable to locate" in error_msg.lower():
        raise RuntimeError(
            "Contract not found by the explorer yet. It may take a few minutes to be indexed."
        )
    else:
        raise RuntimeError(f"Verification failed: {error_msg}")


def query_verification_status(config: dict, api_key: str, guid: str) -> dict:
    """One checkverifystatus call against a Core Scan API"""
    response = requests.get(
        config["api_url"],
        params={
            "apikey": api_key,
            "module": "contract",
            "action": "checkverifystatus",
            "guid": guid,
        },
        timeout=30,
    )
    response.raise_for_status()
    return response.json()


def check_verification_status(network: str, guid: str, max_attempts: int = 10) -> bool:
    """Poll Core Scan until the submission with this GUID passes or fails.

    Returns False on failure or when max_attempts polls stay pending.
    """
    config = EXPLORER_APIS.get(network)
    if not config:
        raise ValueError(f"Unsupported network: {network}. Supported: {list(EXPLORER_APIS.keys())}")
    api_key = os.getenv(config["api_key_env"])

    print(f"[*] Waiting for {config['name']} to process {guid}...")

    for attempt in range(1, max_attempts + 1):
        time.sleep(STATUS_POLL_INTERVAL)
        progress = f"    {config['name']} {attempt}/{max_attempts}:"

        try:
            result = query_verification_status(config, api_key, guid)
        except requests.RequestException as e:
            print(f"{progress} request failed - {e}")
            continue

        status = result.get("result", "")
        if result.get("status") == "1":
            print(f"[+] Source verified on {config['name']}")
            return True
        if "fail" in status.lower():
            print(f"[-] {config['name']} rejected the source: {status}")
            return False

        print(f"{progress} {status or 'no status yet'}")

    print(f"[-] {config['name']} still processing after {max_attempts} polls")
    return False


def verify(network: str, address: str, constructor_arguments=(), contract_name: str = DEFAULT_CONTRACT) -> bool:
    """Verify a deployed contract. Raises RuntimeError if it does not verify."""
    compiled = compile_contract(contract_name)

    guid = submit_verification(
        network=network,
        contract_address=address,
        source_code=compiled["source"],
        contract_name=contract_name,
        compiler_version=compiled["compiler_version"],
        constructor_arguments=encode_constructor_arguments(compiled["abi"], constructor_arguments),
    )

    if guid is None:
        # Already verified
        return True

    if not check_verification_status(network, guid):
        raise RuntimeError(f"Verification of {address} did not succeed")

    return True


def verify_deployment(network: str, path: str = DEPLOYMENT_FILE) -> bool:
    """Re-verify the contract recorded in a deployment file."""
    print(f"\n{'='*60}")
    print(f"Contract Verification - {network.upper()}")
    print(f"{'='*60}\n")

    try:
        deployment = load_deployment_info(path)
    except FileNotFoundError as e:
        print(f"[-] {e}")
        print(f"    Make sure you have deployed the contract first.")
        return False

    contract_address = deployment.get("contractAddress")
    if not contract_address:
        print(f"[-] No contract address found in deployment file")
        return False

    try:
        verify(network, contract_address, constructor_arguments=[])
    except (ValueError, RuntimeError, FileNotFoundError) as e:
        print(f"[-] {e}")
        return False

    config = EXPLORER_APIS[network]
    print(f"\n[+] View verified contract:")
    print(f"    {config['explorer_url']}/address/{contract_address}#code")
    return True


def main():
    network = sys.argv[1].lower() if len(sys.argv) > 1 else DEFAULT_NETWORK

    if network not in EXPLORER_APIS:
        print("Usage: python -m core_escrow_deploy.verify_on_explorer [network]")
        print(f"Supported networks: {', '.join(EXPLORER_APIS.keys())}")
        sys.exit(1)

    success = verify_deployment(network)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
