"""Bulk AES-CTR decryption of OMORI assets."""

import concurrent.futures
import dataclasses
import json
import os
import pathlib
import tempfile
import threading
import typing
import warnings

from cryptography.exceptions import AlreadyFinalized, UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from . import config, progress
from .errors import (
    BeautifyError,
    CipherError,
    DecryptError,
    IoError,
    MalformedFileError,
    NotInitializedError,
)
from .files import (
    IV_LENGTH,
    ciphertext_source,
    find_encrypted_files,
    native_path,
    normalize_path,
)
from .keys import DecryptionContext

STAGE_LABEL = "Decrypting"

ProgressCallback = typing.Callable[[str, str, int, int], None]


@dataclasses.dataclass(frozen=True)
class FileResult:
    source: pathlib.Path
    destination: pathlib.Path


@dataclasses.dataclass(frozen=True)
class FileFailure:
    source: pathlib.Path
    error: BaseException


@dataclasses.dataclass
class DecryptReport:
    succeeded: list[FileResult] = dataclasses.field(default_factory=list)
    failed: list[FileFailure] = dataclasses.field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    def record(self, outcome: "FileResult | FileFailure") -> "DecryptReport":
        if isinstance(outcome, FileFailure):
            self.failed.append(outcome)
        else:
            self.succeeded.append(outcome)
        return self

    def statuses(self) -> dict[str, str]:
        out = {str(item.source): "SUCCESS!" for item in self.succeeded}
        out.update({str(item.source): "FAIL!" for item in self.failed})
        return out


def _decryptor(key: str, iv: bytes):
    try:
        return Cipher(algorithms.AES(key.encode("utf-8")), modes.CTR(iv)).decryptor()
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise CipherError(f"Cannot initialise AES-CTR: {exc}") from exc


def _read_iv(handle, label: str) -> bytes:
    iv = handle.read(IV_LENGTH)
    if len(iv) < IV_LENGTH:
        raise MalformedFileError(f"{label} is {len(iv)} bytes, shorter than the {IV_LENGTH}-byte IV")
    return iv


def _iter_plaintext(decryptor, handle, chunk_size: int) -> typing.Iterator[bytes]:
    while True:
        buf = handle.read(chunk_size)
        if not buf:
            break
        try:
            plain = decryptor.update(buf)
        except (ValueError, AlreadyFinalized) as exc:
            raise CipherError(str(exc)) from exc
        if plain:
            yield plain
    try:
        tail = decryptor.finalize()
    except (ValueError, AlreadyFinalized) as exc:
        raise CipherError(str(exc)) from exc
    if tail:
        yield tail


def decrypt_bytes(key: str, blob: bytes) -> bytes:
    """Decrypt an in-memory ``IV || ciphertext`` blob."""
    if len(blob) < IV_LENGTH:
        raise MalformedFileError(f"Blob is {len(blob)} bytes, shorter than the {IV_LENGTH}-byte IV")
    decryptor = _decryptor(key, bytes(blob[:IV_LENGTH]))
    try:
        return decryptor.update(bytes(blob[IV_LENGTH:])) + decryptor.finalize()
    except (ValueError, AlreadyFinalized) as exc:
        raise CipherError(str(exc)) from exc


def beautify_json(data: bytes, indent: int | None = None) -> bytes:
    try:
        parsed = json.loads(data.decode("utf-8"))
        text = json.dumps(parsed, indent=config.JSON_INDENT if indent is None else indent, ensure_ascii=False)
        return text.encode("utf-8")
    except (UnicodeError, ValueError, TypeError, RecursionError) as exc:
        raise BeautifyError(str(exc)) from exc


def _write_replacing(destination: pathlib.Path, chunks: typing.Iterable[bytes]) -> None:
    # The destination is only replaced once every chunk has been written.
    fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            for chunk in chunks:
                handle.write(chunk)
            handle.flush()
        # mkstemp creates 0600 files
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, destination)
    except BaseException:
        try:
            os.remove(tmp_name)
        except FileNotFoundError:
            pass
        raise


def decrypt_file(
    key: str,
    path: "str | os.PathLike[str]",
    *,
    beautify: bool = True,
    chunk_size: int | None = None,
) -> pathlib.Path:
    """Decrypt one asset beside itself and return the destination path."""
    encrypted = normalize_path(path)
    destination = native_path(encrypted)
    source = ciphertext_source(encrypted)
    chunk = config.STREAM_CHUNK_SIZE if chunk_size is None else max(1, int(chunk_size))
    try:
        with open(source, "rb") as handle:
            iv = _read_iv(handle, source.name)
            decryptor = _decryptor(key, iv)
            if destination.suffix != ".json":
                _write_replacing(destination, _iter_plaintext(decryptor, handle, chunk))
                return destination
            plaintext = b"".join(_iter_plaintext(decryptor, handle, chunk))
        if beautify:
            try:
                plaintext = beautify_json(plaintext)
            except BeautifyError as exc:
                warnings.warn(f"Failed to beautify json {destination.name}: {exc}", RuntimeWarning, stacklevel=2)
        _write_replacing(destination, (plaintext,))
        return destination
    except DecryptError:
        raise
    except OSError as exc:
        raise IoError(f"{encrypted}: {exc}") from exc


def decrypt_all(
    context: DecryptionContext | None,
    files: "typing.Iterable[str | os.PathLike[str]] | None" = None,
    *,
    beautify: bool = True,
    progress_callback: ProgressCallback | None = None,
    max_workers: int | None = None,
    chunk_size: int | None = None,
    silent: bool = False,
) -> DecryptReport:
    if context is None or not context.key:
        raise NotInitializedError("Decryption key not found")

    if files is None:
        progress.status("Finding files to decrypt...", silent=silent)
        files = find_encrypted_files(context.folder)
    paths = [normalize_path(item) for item in files]
    report = DecryptReport()
    if not paths:
        progress.status("Nothing found!", silent=silent)
        return report

    total = len(paths)
    counter = 0
    counter_lock = threading.Lock()

    def _report_progress(path: pathlib.Path) -> None:
        nonlocal counter
        with counter_lock:
            counter += 1
            try:
                progress_callback(STAGE_LABEL, path.name, counter, total)
            except KeyboardInterrupt:
                raise
            except Exception as exc:
                # Display errors are never recorded against the file.
                progress.error(f"Progress reporting failed: {exc}", silent=silent)

    def _process(path: pathlib.Path) -> "FileResult | FileFailure":
        if progress_callback is not None:
            _report_progress(path)
        try:
            destination = decrypt_file(context.key, path, beautify=beautify, chunk_size=chunk_size)
            return FileResult(path, destination)
        except KeyboardInterrupt:
            raise
        except Exception as exc:
            progress.error(f"Failed to decrypt {path}: {exc}", silent=silent)
            return FileFailure(path, exc)

    workers = config.CPU_COUNT if max_workers is None else max(1, int(max_workers))
    if total > 1 and workers > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=min(workers, total)) as executor:
            outcomes = list(executor.map(_process, paths))
    else:
        outcomes = [_process(path) for path in paths]

    for outcome in outcomes:
        report.record(outcome)
    return report
