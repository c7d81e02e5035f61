import re

from santa.security import AdminGate, generate_token


def test_generate_token_is_128_bit_hex():
    token = generate_token()
    assert re.fullmatch(r"[0-9a-f]{32}", token)


def test_generate_token_is_unique_across_calls():
    tokens = {generate_token() for _ in range(500)}
    assert len(tokens) == 500


def test_admin_gate_accepts_exact_secret_only():
    gate = AdminGate("sleigh")
    assert gate.authorize("sleigh")
    assert not gate.authorize("Sleigh")
    assert not gate.authorize("sleigh ")
    assert not gate.authorize("")
    assert not gate.authorize(None)
