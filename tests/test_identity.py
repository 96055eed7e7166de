import json

import pytest

from eli5.models import User
from eli5.persistence.identity import LocalIdentityStore, new_browser_token

ADA = User(id="u1", email="ada@example.com", name="Ada Lovelace")
BOB = User(id="u2", email="bob@example.com", name="Bob")


def test_read_without_file(tmp_path):
    assert LocalIdentityStore(tmp_path / "identity.json", "browser-a").read() is None


def test_write_then_read_in_new_instance(tmp_path):
    path = tmp_path / "nested" / "identity.json"
    LocalIdentityStore(path, "browser-a").write(ADA)

    assert LocalIdentityStore(path, "browser-a").read() == ADA
    assert json.loads(path.read_text())["browser-a"]["eli5_user"]["email"] == "ada@example.com"


def test_other_browser_does_not_see_login(tmp_path):
    path = tmp_path / "identity.json"
    LocalIdentityStore(path, "browser-a").write(ADA)

    assert LocalIdentityStore(path, "browser-b").read() is None


def test_browsers_keep_separate_logins(tmp_path):
    path = tmp_path / "identity.json"
    browser_a = LocalIdentityStore(path, "browser-a")
    browser_b = LocalIdentityStore(path, "browser-b")
    browser_a.write(ADA)
    browser_b.write(BOB)

    browser_b.clear()

    assert browser_a.read() == ADA
    assert browser_b.read() is None


def test_clear_keeps_unrelated_keys(tmp_path):
    path = tmp_path / "identity.json"
    path.write_text(json.dumps({"browser-a": {"theme": "dark"}}))
    store = LocalIdentityStore(path, "browser-a")
    store.write(ADA)

    store.clear()

    assert store.read() is None
    assert json.loads(path.read_text()) == {"browser-a": {"theme": "dark"}}


@pytest.mark.parametrize("token", ["", "   "])
def test_browser_token_required(tmp_path, token):
    with pytest.raises(ValueError):
        LocalIdentityStore(tmp_path / "identity.json", token)


def test_new_browser_tokens_are_unique():
    tokens = {new_browser_token() for _ in range(50)}
    assert len(tokens) == 50


def test_corrupt_file_treated_as_logged_out(tmp_path):
    path = tmp_path / "identity.json"
    path.write_text("{not json")

    assert LocalIdentityStore(path, "browser-a").read() is None


def test_malformed_record_treated_as_logged_out(tmp_path):
    path = tmp_path / "identity.json"
    path.write_text(json.dumps({"browser-a": {"eli5_user": {"id": "u1"}}}))

    assert LocalIdentityStore(path, "browser-a").read() is None
