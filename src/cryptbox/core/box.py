"""
Box: a named, encrypted, persistent key-value store

File layout for reference:
==============================
 - <storage_root>/
      - {name}.crypt   base64( encrypt( canonical_json( data + _header ) ) )
==============================
For reference:
> There is no plaintext framing in the file. The format version lives in the
  encrypted header, so a wrong key learns nothing about the box.
> The key is deferrable: a box can be created without one and given the key
  at load() time. Only the SHA-512 digest of the key is kept, in memory.
> Recoverable failures (missing file, wrong key, unwritable path, type
  mismatches) are logged and reported through the return value. The box
  stays usable and its in-memory state is left as it was.

Save:  data -> header stamped -> codec.encode -> cipher.encrypt -> transport.encode -> file
Load:  file -> transport.decode -> cipher.decrypt -> codec.decode -> data, header
"""

from __future__ import annotations

import copy
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional

from . import codec, transport
from .config import EXTENSION, HEADER_KEY, FORMAT_VERSION, resolve_algorithm, resolve_storage_root
from .exceptions import (
    CodecError,
    DecryptError,
    EncodeError,
    InvalidNameError,
    KeyNotFoundError,
    MissingKeyError,
    MissingNameError,
    ReadError,
    StorageError,
    TypeMismatchError,
    UnsupportedAlgorithmError,
    UseAfterDestroyError,
    WriteError,
)
from .header import Header
from .lifecycle import LifecycleEvent, LifecycleHost
from .models import BoxState, ValueType
from ..security.cipher import HAS_CRYPTOGRAPHY, get_cipher
from ..security.kdf import derive_key, wipe_key

logger = logging.getLogger(__name__)


class Box:
    """One named encrypted box backed by ``<storage_root>/<name>.crypt``."""

    def __init__(
        self,
        name: str,
        key: Optional[str] = None,
        algorithm: Optional[str] = None,
        storage_root: Optional[str | Path] = None,
        host: Optional[LifecycleHost] = None,
    ):
        self._state = BoxState.UNINITIALIZED
        # guards data, header and key against lifecycle callbacks from other threads
        self._lock = threading.RLock()

        if not name or not str(name).strip():
            raise MissingNameError("No name specified on creation.")
        separators = {"/", "\\", os.sep, os.altsep} - {None}
        if str(name) in (".", "..") or any(sep in str(name) for sep in separators):
            raise InvalidNameError(f"Box name can't be used as a file name: {name!r}")

        self._name = str(name)
        self._algorithm = resolve_algorithm(algorithm)
        self._cipher = get_cipher(self._algorithm)
        if not HAS_CRYPTOGRAPHY and self._algorithm != "none":
            logger.warning(
                "cryptography package not found. Box '%s' will be stored unencrypted.",
                self._name,
            )

        self._key: Optional[bytearray] = None
        if key is not None:
            # raises InvalidKeyError on a blank key
            self._key = bytearray(derive_key(key))

        self._root = resolve_storage_root(storage_root)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # reported again as a WriteError on save
            logger.error("%s", StorageError(f"Can't create storage directory at path - {self._root} - {e}"))
        self._filename = f"{self._name}.{EXTENSION}"
        self._path = self._root / self._filename

        self._data: dict[str, Any] = {}
        self._header = Header()
        # First time this box exists: stamp the creation time.
        if not self._exists():
            self._header.on_create()

        self._host = host
        if self._host is not None:
            self._host.subscribe(self.handle_event)

        self._state = BoxState.UNLOADED

    def __repr__(self):
        return f"Box(name={self._name!r}, algorithm={self._algorithm!r}, state={self._state.value!r})"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> BoxState:
        return self._state

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def encrypted(self) -> bool:
        """Whether data written by this box is actually encrypted."""
        return self._cipher.encrypting

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def path(self) -> Path:
        return self._path

    @property
    def extension(self) -> str:
        return EXTENSION

    @property
    def header(self) -> Header:
        """A copy of the current header."""
        self._require_alive()
        with self._lock:
            return copy.copy(self._header)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def get(self, name: Any, default: Any = None) -> Any:
        """Return the value stored under ``name`` (or ``default``)."""
        self._require_alive()
        name = str(name)
        with self._lock:
            if name == HEADER_KEY:
                return self._header.to_dict()
            self._header.on_access()
            return self._data.get(name, default)

    def set(self, name: Any, value: Any) -> None:
        """Store ``value`` under ``name``. Values must be JSON-representable."""
        self._require_alive()
        name = str(name)
        if name == HEADER_KEY:
            logger.warning("'%s' is reserved for the box header and can't be set.", HEADER_KEY)
            return
        # raises EncodeError for values that would not survive a save/load cycle
        value = codec.validate(value)
        with self._lock:
            self._header.on_modify()
            self._data[name] = value

    def keys(self) -> List[str]:
        self._require_alive()
        with self._lock:
            return sorted(self._data)

    def is_set(self, name: Any) -> bool:
        return self.get(name) is not None

    def get_type(self, name: Any) -> Optional[ValueType]:
        value = self.get(name)
        if value is None:
            return None
        return codec.value_type(value)

    def set_if_new(self, name: Any, value: Any) -> bool:
        """Set a value only if nothing is stored under ``name`` yet."""
        if not self.is_set(name):
            self.set(name, value)
            return True
        return False

    def set_if_higher(self, name: Any, value: Any) -> bool:
        """Set a value if it is higher than the current one or nothing is stored."""
        return self._set_if(name, value, lambda current, new: current < new)

    def set_if_lower(self, name: Any, value: Any) -> bool:
        """Set a value if it is lower than the current one or nothing is stored."""
        return self._set_if(name, value, lambda current, new: current > new)

    def increment(self, name: Any, amount: int | float = 1) -> bool:
        """Add ``amount`` to a numeric value. Absent or non-numeric values are left alone."""
        return self._adjust(name, amount, "increment")

    def decrement(self, name: Any, amount: int | float = 1) -> bool:
        """Subtract ``amount`` from a numeric value. Absent or non-numeric values are left alone."""
        return self._adjust(name, amount, "decrement")

    def _set_if(self, name: Any, value: Any, replace: Callable[[Any, Any], bool]) -> bool:
        with self._lock:
            if not self.is_set(name):
                self.set(name, value)
                return True
            current = self.get(name)
            # bool is an int subclass, so True < 5 would compare without the tag check
            comparable = codec.value_type(current) is codec.value_type(value)
            should_set = False
            if comparable:
                try:
                    should_set = replace(current, value)
                except TypeError:
                    comparable = False
            if not comparable:
                error = TypeMismatchError(
                    f"Data named {name} ({type(current).__name__}) can't be compared "
                    f"with {type(value).__name__}."
                )
                logger.warning("%s", error)
                return False
            if should_set:
                self.set(name, value)
            return should_set

    def _adjust(self, name: Any, amount: int | float, op: str) -> bool:
        with self._lock:
            if not self.is_set(name):
                logger.warning("%s", KeyNotFoundError(f"No data named {name}, can't perform {op}."))
                return False
            if self.get_type(name) is not ValueType.NUMBER:
                logger.warning(
                    "%s",
                    TypeMismatchError(f"Data named {name} is not a 'number', can't perform {op}."),
                )
                return False
            if not codec.is_number(amount):
                logger.warning(
                    "%s",
                    TypeMismatchError(f"Amount {amount!r} is not a 'number', can't perform {op}."),
                )
                return False
            current = self.get(name)
            self.set(name, current + amount if op == "increment" else current - amount)
            return True

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def set_key(self, key: Optional[str]) -> None:
        """Hash and remember a new key. ``None`` keeps the current one."""
        self._require_alive()
        if key is None:
            return
        digest = bytearray(derive_key(key))
        with self._lock:
            wipe_key(self._key)
            self._key = digest

    def verify_key(self, key: Optional[str]) -> bool:
        """Check whether ``key`` opens the file on disk.

        The box's own key and data are never touched. Any failure (no file,
        unreadable file, wrong key, corrupted payload) reads as ``False``.
        """
        self._require_alive()
        try:
            digest = derive_key(key)
            self._decode_file(self._read_file(), digest)
        except (MissingKeyError, ReadError, DecryptError, CodecError) as e:
            logger.debug("Key verification failed for '%s': %s", self._name, e)
            return False
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, key: Optional[str] = None) -> bool:
        """Read and decrypt the box file.

        Returns ``True`` on success. A box that was never saved loads as an
        empty box. On failure the current data, header and key are kept.
        """
        self._require_alive()
        if key == "":
            logger.error("Blank key specified on load.")
            return False

        with self._lock:
            digest: Optional[bytes] = derive_key(key) if key is not None else None
            effective = digest if digest is not None else self._key
            if effective is None and self._cipher.encrypting:
                logger.error("%s", MissingKeyError(f"No key specified during load of '{self._name}'."))
                return False

            if not self._exists():
                if digest is not None:
                    self._commit_key(digest)
                self._data = {}
                self._header.on_create()
                self._header.on_load()
                self._state = BoxState.LOADED
                logger.warning(
                    "Can't open file for reading at path - %s - if this box was just created "
                    "then you can ignore this message.",
                    self._path,
                )
                return True

            try:
                mapping = self._decode_file(self._read_file(), effective)
            except ReadError as e:
                logger.error("%s", e)
                return False
            except (DecryptError, CodecError) as e:
                logger.error("Can't decrypt box '%s', the key did not verify (%s).", self._name, e)
                return False

            header = Header.from_dict(mapping.pop(HEADER_KEY, None))
            if header.version > FORMAT_VERSION:
                logger.warning(
                    "Box '%s' was written with format version %s (this build supports %s).",
                    self._name,
                    header.version,
                    FORMAT_VERSION,
                )
            if digest is not None:
                self._commit_key(digest)
            self._data = mapping
            self._header = header
            self._header.on_load()
            self._state = BoxState.LOADED
            return True

    def save(self) -> bool:
        """Encrypt the box and write it to disk. Returns ``True`` on success."""
        self._require_alive()
        with self._lock:
            if self._state is BoxState.UNLOADED and self._exists():
                logger.error(
                    "Box '%s' was never loaded; refusing to overwrite %s.", self._name, self._path
                )
                return False
            if self._key is None and self._cipher.encrypting:
                logger.error("%s", MissingKeyError(f"No key specified during save of '{self._name}'."))
                return False

            self._header.on_save()
            mapping = dict(self._data)
            mapping[HEADER_KEY] = self._header.to_dict()
            try:
                payload = codec.encode(mapping)
            except EncodeError as e:
                logger.error("Can't encode box '%s': %s", self._name, e)
                return False
            blob = self._cipher.encrypt(payload, bytes(self._key or b""))
            try:
                self._write_file(transport.encode(blob))
            except WriteError as e:
                logger.error("%s", e)
                return False
            return True

    def clear(self) -> bool:
        """Drop all data (header included) and save the empty box."""
        self._require_alive()
        with self._lock:
            self._data = {}
            self._header = Header.fresh()
            self._state = BoxState.LOADED
            return self.save()

    def wipe(self) -> bool:
        """Clear the box and delete its file."""
        self._require_alive()
        with self._lock:
            self.clear()
            try:
                self._path.unlink()
            except FileNotFoundError:
                return True
            except OSError as e:
                logger.error("Can't delete file at path - %s - %s", self._path, e)
                return False
            return True

    def exists(self, name: Optional[str] = None) -> bool:
        """Whether a box file named ``name`` (default: this box) exists next to this one."""
        if name is None:
            return self._exists()
        return self._exists(self._root / f"{name}.{EXTENSION}")

    def set_sync(self, sync: bool) -> Optional[bool]:
        """Ask the host to include/exclude this file from backups.

        Returns ``None`` when there is no host or it has no backup control.
        """
        self._require_alive()
        if self._host is None:
            return None
        return self._host.set_sync(self._filename, sync)

    def destroy(self) -> None:
        """Unsubscribe from the host and release data and key. Safe to call twice."""
        if self._state is BoxState.DESTROYED:
            return
        with self._lock:
            if self._host is not None:
                self._host.unsubscribe(self.handle_event)
                self._host = None
            wipe_key(self._key)
            self._key = None
            self._data = {}
            self._state = BoxState.DESTROYED

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def handle_event(self, event: LifecycleEvent) -> None:
        if self._state is BoxState.DESTROYED:
            return
        if event in (LifecycleEvent.SUSPEND, LifecycleEvent.EXIT):
            self.save()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_alive(self) -> None:
        if self._state is BoxState.DESTROYED:
            raise UseAfterDestroyError(f"Box '{self._name}' has been destroyed.")

    def _exists(self, path: Optional[Path] = None) -> bool:
        return (path or self._path).is_file()

    def _commit_key(self, digest: bytes) -> None:
        wipe_key(self._key)
        self._key = bytearray(digest)

    def _decode_file(self, text: str, key: Optional[bytes]) -> dict:
        blob = transport.decode(text)
        payload = self._cipher.decrypt(blob, bytes(key or b""))
        return codec.decode(payload)

    def _read_file(self) -> str:
        try:
            with open(self._path, "r", encoding="ascii") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(f"Can't open file for reading at path - {self._path} - {e}") from e

    def _write_file(self, text: str) -> None:
        # Write next to the target then swap it in, so a crash never leaves half a file.
        tmp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="ascii",
                dir=self._root,
                prefix=f".{self._name}.",
                suffix=".tmp",
                delete=False,
            ) as tmpf:
                tmp_path = Path(tmpf.name)
                tmpf.write(text)
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None:
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
            raise WriteError(f"Can't open file for writing at path - {self._path} - {e}") from e


def open_box(
    name: str,
    key: Optional[str] = None,
    algorithm: Optional[str] = None,
    storage_root: Optional[str | Path] = None,
    host: Optional[LifecycleHost] = None,
) -> Optional[Box]:
    """Create a Box, logging construction errors and returning ``None`` instead of raising."""
    try:
        return Box(name, key=key, algorithm=algorithm, storage_root=storage_root, host=host)
    except (MissingNameError, MissingKeyError, UnsupportedAlgorithmError) as e:
        logger.error("%s", e)
        return None
