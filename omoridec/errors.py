"""Error taxonomy shared by key resolution and asset decryption."""


class DecryptError(Exception):
    """Base class for every error raised by omoridec."""


class InvalidKeyError(DecryptError):
    """An embedded 1.0.0 key was found but its fingerprint does not verify."""


class NotInitializedError(DecryptError):
    """Decryption was requested before a key was resolved."""


class MalformedFileError(DecryptError):
    """The ciphertext source is too short to hold an IV."""


class CipherError(DecryptError):
    """AES-CTR could not be set up for the key or failed while decrypting."""


class BeautifyError(DecryptError):
    """JSON re-indentation failed; callers fall back to the raw plaintext."""


class IoError(DecryptError, OSError):
    """Reading the ciphertext or writing the plaintext failed."""
