from chaincfg.models import ToolchainConfig

AVALANCHE_FUJI_RPC = "https://api.avax-test.network/ext/bc/C/rpc"
AVALANCHE_FUJI_CHAIN_ID = 43113

DEFAULT_CONFIG = ToolchainConfig.model_validate(
    {
        # Etherscan/Snowtrace source verification
        "plugins": ["truffle-plugin-verify"],
        "compilers": {
            "solc": {
                "version": "^0.8.11",
                "optimizer": {"enabled": True, "runs": 1},
            },
        },
        "networks": {
            "development": {
                "host": "172.21.32.1",  # WSL RPC provider
                "port": 7545,
                "network_id": "*",
            },
            "fuji": {
                "url": AVALANCHE_FUJI_RPC,
                "network_id": AVALANCHE_FUJI_CHAIN_ID,
                "signer": {"private_key_env": "PRIVATE_KEY"},
            },
        },
        "api_keys": {"snowtrace": "SNOWTRACE_KEY"},
    },
)
