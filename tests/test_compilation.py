"""
Test suite for Project contract compilation
"""

import pytest

from core_escrow_deploy.contracts import compile_contract


def test_contract_compilation(compiled_contract):
    """Test that Project.vy compiles successfully"""
    assert compiled_contract["name"] == "Project"
    assert len(compiled_contract["bytecode"]) > 0
    assert len(compiled_contract["abi"]) > 0
    assert compiled_contract["compiler_version"].startswith("v0.4")


def test_contract_abi_functions(compiled_contract):
    """Test that contract ABI contains expected functions"""
    function_names = [item["name"] for item in compiled_contract["abi"] if item["type"] == "function"]

    expected_functions = [
        "owner",
        "escrow_count",
        "escrows",
        "create_escrow",
        "release",
        "refund",
        "transfer_ownership",
    ]

    for func in expected_functions:
        assert func in function_names, f"Function {func} not found in ABI"


def test_contract_events(compiled_contract):
    """Test that contract ABI contains expected events"""
    event_names = [item["name"] for item in compiled_contract["abi"] if item["type"] == "event"]

    for event in ["EscrowCreated", "EscrowReleased", "EscrowRefunded"]:
        assert event in event_names, f"Event {event} not found in ABI"


def test_constructor_takes_no_arguments(compiled_contract):
    constructors = [item for item in compiled_contract["abi"] if item["type"] == "constructor"]
    assert all(not item["inputs"] for item in constructors)


def test_source_is_kept_for_verification(compiled_contract):
    assert "def create_escrow" in compiled_contract["source"]


def test_missing_contract_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        compile_contract("Missing", tmp_path)
