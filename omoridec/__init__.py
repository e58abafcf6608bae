from .decryptor import DecryptReport, FileFailure, FileResult, decrypt_all, decrypt_bytes, decrypt_file
from .errors import (
    BeautifyError,
    CipherError,
    DecryptError,
    InvalidKeyError,
    IoError,
    MalformedFileError,
    NotInitializedError,
)
from .files import find_encrypted_files, native_path
from .keys import (
    FALLBACK_KEY,
    KEY_HASH,
    OLD_KEY_HASH,
    DecryptionContext,
    KeyResolver,
    init,
    key_from_launch_options,
    resolve_key,
)
from .mods import detect_mods
from .version import __version__


def decrypt_folder(folder: str, key: str = "", *, beautify: bool = True, max_workers: int | None = None,
                   silent: bool = False) -> DecryptReport:
    return decrypt_all(init(folder, key, silent=silent), beautify=beautify, max_workers=max_workers, silent=silent)
