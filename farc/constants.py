# Signatures (big-endian u32 of the ASCII tag)
SIG_FArC = b"FArC"
SIG_FARC = b"FARC"
SIG_FARc = b"FARc"

# Archive flags (header word at offset 8)
AFLAG_UNK0 = 1 << 0
AFLAG_GZIP = 1 << 1
AFLAG_ENCRYPTED = 1 << 2
AFLAG_UNK3 = 1 << 3
AFLAG_UNK4 = 1 << 4
AFLAG_UNK5 = 1 << 5
AFLAG_ZSTD = 1 << 6
AFLAG_UNK7 = 1 << 7

# Entry flags (last u32 of each entry record)
EFLAG_UNK0 = 1 << 0
EFLAG_GZIP = 1 << 1
EFLAG_ENCRYPTED = 1 << 2
EFLAG_UNK3 = 1 << 3
EFLAG_SPLIT_CHUNKS = 1 << 4
EFLAG_ZSTD = 1 << 5


# Encryption layout
AES_KEY_SIZE = 16
AES_IV_SIZE = 16
AES_BLOCK_SIZE = 16
HEADER_PREFIX_SIZE = 16  # signature, header size, flags, reserved
IV_OFFSET = HEADER_PREFIX_SIZE
ENCRYPTED_DATA_OFFSET = HEADER_PREFIX_SIZE + AES_IV_SIZE  # 32
ENCRYPTED_ENTRY_OFFSET_ADJUST = AES_KEY_SIZE

# Published key used by every encrypted FGO Arcade archive
FARC_AES_KEY_HEX = "62EC7CD79141695E53592ACC10CDC04C"


# Compression methods (derived from entry flags)
METHOD_NONE = "none"
METHOD_GZIP = "gzip"
METHOD_ZSTD = "zstd"


# Chunk table
CHUNK_WORD_SIZE = 4
MAX_CHUNK_TABLE_ITERATIONS = 0x4000  # 16384
