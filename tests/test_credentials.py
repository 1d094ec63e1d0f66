# Tests for the credential placeholder
from ccconfig.credentials import PLACEHOLDER_KEY, PLACEHOLDER_VALUE, unlock_credentials
from conftest import read_json_file, write_json_file


def test_creates_missing_file(paths) -> None:
    """Test the config file is created with the placeholder key."""
    assert unlock_credentials(paths) is True
    assert read_json_file(paths.credentials_file) == {PLACEHOLDER_KEY: PLACEHOLDER_VALUE}


def test_adds_key_preserving_others(paths) -> None:
    """Test the key is added without dropping existing entries."""
    write_json_file(paths.credentials_file, {"theme": "dark"})

    assert unlock_credentials(paths) is True
    assert read_json_file(paths.credentials_file) == {"theme": "dark", PLACEHOLDER_KEY: "xxx"}


def test_existing_key_untouched(paths) -> None:
    """Test an existing key is never overwritten."""
    write_json_file(paths.credentials_file, {PLACEHOLDER_KEY: "real-key"})

    assert unlock_credentials(paths) is False
    assert read_json_file(paths.credentials_file) == {PLACEHOLDER_KEY: "real-key"}
