class FArcError(Exception):
    """Base class for FArc-specific errors."""


# Cursor-level
class OutOfBoundsError(FArcError):
    pass


class MalformedStringError(FArcError):
    pass


# Header/entry table
class FormatError(FArcError):
    pass


class UnknownSignatureError(FormatError):
    pass


class TruncatedError(FormatError):
    pass


class EntryBoundsError(FormatError):
    pass


# Encryption
class CryptoError(FArcError):
    pass


class DecryptFailedError(CryptoError):
    pass


# Per-entry decode
class DecodeError(FArcError):
    pass


class CorruptChunkTableError(DecodeError):
    pass


class UnsupportedMethodError(DecodeError):
    pass


class DecompressFailedError(DecodeError):
    pass


# Extraction
class ExtractError(FArcError):
    pass
