packed_user_operation_components = [
    {"internalType": "address", "name": "sender", "type": "address"},
    {"internalType": "uint256", "name": "nonce", "type": "uint256"},
    {"internalType": "bytes", "name": "initCode", "type": "bytes"},
    {"internalType": "bytes", "name": "callData", "type": "bytes"},
    {"internalType": "bytes32", "name": "accountGasLimits", "type": "bytes32"},
    {"internalType": "uint256", "name": "preVerificationGas", "type": "uint256"},
    {"internalType": "bytes32", "name": "gasFees", "type": "bytes32"},
    {"internalType": "bytes", "name": "paymasterAndData", "type": "bytes"},
    {"internalType": "bytes", "name": "signature", "type": "bytes"},
]

entry_point_v07_abi = [
    {
        "anonymous": False,
        "inputs": [
            {
                "indexed": True,
                "internalType": "bytes32",
                "name": "userOpHash",
                "type": "bytes32",
            },
            {
                "indexed": True,
                "internalType": "address",
                "name": "sender",
                "type": "address",
            },
            {
                "indexed": True,
                "internalType": "address",
                "name": "paymaster",
                "type": "address",
            },
            {
                "indexed": False,
                "internalType": "uint256",
                "name": "nonce",
                "type": "uint256",
            },
            {
                "indexed": False,
                "internalType": "bool",
                "name": "success",
                "type": "bool",
            },
            {
                "indexed": False,
                "internalType": "uint256",
                "name": "actualGasCost",
                "type": "uint256",
            },
            {
                "indexed": False,
                "internalType": "uint256",
                "name": "actualGasUsed",
                "type": "uint256",
            },
        ],
        "name": "UserOperationEvent",
        "type": "event",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "sender", "type": "address"},
            {"internalType": "uint192", "name": "key", "type": "uint192"},
        ],
        "name": "getNonce",
        "outputs": [{"internalType": "uint256", "name": "nonce", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {
                "components": packed_user_operation_components,
                "internalType": "struct PackedUserOperation",
                "name": "userOp",
                "type": "tuple",
            }
        ],
        "name": "getUserOpHash",
        "outputs": [{"internalType": "bytes32", "name": "", "type": "bytes32"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {
                "components": packed_user_operation_components,
                "internalType": "struct PackedUserOperation[]",
                "name": "ops",
                "type": "tuple[]",
            },
            {
                "internalType": "address payable",
                "name": "beneficiary",
                "type": "address",
            },
        ],
        "name": "handleOps",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

safe_4337_module_abi = [
    {
        "inputs": [{"internalType": "address", "name": "entryPoint", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "value", "type": "uint256"},
            {"internalType": "bytes", "name": "data", "type": "bytes"},
            {"internalType": "uint8", "name": "operation", "type": "uint8"},
        ],
        "name": "executeUserOp",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {
                "components": packed_user_operation_components,
                "internalType": "struct PackedUserOperation",
                "name": "userOp",
                "type": "tuple",
            }
        ],
        "name": "getOperationHash",
        "outputs": [
            {"internalType": "bytes32", "name": "operationHash", "type": "bytes32"}
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

safe_module_setup_abi = [
    {
        "inputs": [
            {"internalType": "address[]", "name": "modules", "type": "address[]"}
        ],
        "name": "enableModules",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
