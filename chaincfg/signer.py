from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_hex, remove_0x_prefix
from pydantic import SecretStr

from chaincfg.errors import InvalidSecretError
from chaincfg.models import Signer

PRIVATE_KEY_HEX_LENGTH = 64


def build_signer(private_key: SecretStr, endpoint: str, source: str) -> Signer:
    """
    Bind a private key to the endpoint it will sign transactions for.

    Args:
        private_key (SecretStr): The key, hex encoded with or without 0x.
        endpoint (str): Endpoint URL of the profile.
        source (str): Name of the variable the key came from, for errors.

    Returns:
        Signer: The signer, carrying the key unchanged and its address.

    Raises:
        InvalidSecretError: If the value is not a usable secp256k1 key.
    """
    key = private_key.get_secret_value()
    if not is_hex(key) or len(remove_0x_prefix(key)) != PRIVATE_KEY_HEX_LENGTH:
        raise InvalidSecretError(source, "expected 32 bytes of hex")
    try:
        account: LocalAccount = Account.from_key(key)
    except Exception as exc:
        raise InvalidSecretError(source, str(exc)) from exc
    return Signer(address=account.address, endpoint=endpoint, private_key=private_key)
