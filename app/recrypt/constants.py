# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# curve and encodings
SCALAR_SIZE = 32
COMPRESSED_POINT_SIZE = 33
UNCOMPRESSED_POINT_SIZE = 65

# aes-256-gcm envelope
AES_KEY_SIZE = 32
NONCE_SIZE = 12

# observation wire format
WIRE_SEPARATOR = "|"
CAPSULE_E_FIELD = "capsuleE"
CAPSULE_V_FIELD = "capsuleV"
CAPSULE_S_FIELD = "capsuleS"

# capsule cbor map keys
CAPSULE_E_KEY = 0
CAPSULE_V_KEY = 1
CAPSULE_S_KEY = 2

# runtime defaults
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_WORKERS = 8
