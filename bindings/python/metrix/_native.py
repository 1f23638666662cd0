"""ctypes binding for the Metrix C API."""

from __future__ import annotations

import ctypes
import ctypes.util
import enum
import os
import sys
import threading
from typing import List, Optional

from .errors import NativeLibraryError

LIB_PATH_ENV = "METRIX_LIB_PATH"


class MetrixValueType(enum.IntEnum):
    """Type tag of a single result cell."""

    NULL = 0
    BOOL = 1
    INT = 2
    DOUBLE = 3
    STRING = 4
    NODE = 5
    EDGE = 6


class MetrixNode(ctypes.Structure):
    _fields_ = [
        ("id", ctypes.c_int64),
        ("label", ctypes.c_char_p),
    ]


class MetrixEdge(ctypes.Structure):
    _fields_ = [
        ("id", ctypes.c_int64),
        ("source_id", ctypes.c_int64),
        ("target_id", ctypes.c_int64),
        ("type", ctypes.c_char_p),
    ]


def _library_name() -> str:
    if sys.platform == "darwin":
        return "libmetrix.dylib"
    if sys.platform == "win32":
        return "metrix.dll"
    return "libmetrix.so"


def find_library() -> str:
    """Locate the Metrix shared library.

    Search order:
    1. METRIX_LIB_PATH (a library file or a directory holding it)
    2. The package directory and its ``lib/`` subdirectory
    3. The system loader path (``ctypes.util.find_library``)
    """
    lib_name = _library_name()
    pkg_dir = os.path.dirname(os.path.abspath(__file__))
    search_paths: List[str] = []

    env_path = os.environ.get(LIB_PATH_ENV)
    if env_path:
        if os.path.isfile(env_path):
            return env_path
        search_paths.append(env_path)
    search_paths.append(pkg_dir)
    search_paths.append(os.path.join(pkg_dir, "lib"))

    for path in search_paths:
        lib_path = os.path.join(path, lib_name)
        if os.path.exists(lib_path):
            return lib_path

    system_path = ctypes.util.find_library("metrix")
    if system_path:
        return system_path

    raise NativeLibraryError(
        f"Could not find {lib_name}. "
        f"Searched in: {', '.join(search_paths)} and the system library path. "
        f"Set {LIB_PATH_ENV} to the library file or its directory."
    )


class NativeLibrary:
    """Typed view over the ``metrix_*`` symbols of a loaded library.

    Pointers come back as plain integers (``None`` for NULL) and C strings as
    ``bytes`` (``None`` for NULL). Decoding is left to the caller.
    """

    def __init__(self, lib: ctypes.CDLL) -> None:
        self._lib = lib
        try:
            self._setup_bindings()
        except AttributeError as err:
            raise NativeLibraryError(f"native library is missing a symbol: {err}") from err

    @classmethod
    def load(cls, path: Optional[str] = None) -> "NativeLibrary":
        lib_path = path or find_library()
        try:
            lib = ctypes.CDLL(lib_path)
        except OSError as err:
            raise NativeLibraryError(f"failed to load {lib_path}: {err}") from err
        return cls(lib)

    def _setup_bindings(self) -> None:
        lib = self._lib
        db_p = ctypes.c_void_p
        res_p = ctypes.c_void_p

        # Database lifecycle
        lib.metrix_open.argtypes = [ctypes.c_char_p]
        lib.metrix_open.restype = db_p
        lib.metrix_open_if_exists.argtypes = [ctypes.c_char_p]
        lib.metrix_open_if_exists.restype = db_p
        lib.metrix_close.argtypes = [db_p]
        lib.metrix_close.restype = None
        lib.metrix_get_last_error.argtypes = []
        lib.metrix_get_last_error.restype = ctypes.c_char_p

        # Execution
        lib.metrix_execute.argtypes = [db_p, ctypes.c_char_p]
        lib.metrix_execute.restype = res_p
        lib.metrix_result_is_success.argtypes = [res_p]
        lib.metrix_result_is_success.restype = ctypes.c_bool
        lib.metrix_result_get_error.argtypes = [res_p]
        lib.metrix_result_get_error.restype = ctypes.c_char_p
        lib.metrix_result_close.argtypes = [res_p]
        lib.metrix_result_close.restype = None

        # Result metadata and iteration
        lib.metrix_result_column_count.argtypes = [res_p]
        lib.metrix_result_column_count.restype = ctypes.c_int
        lib.metrix_result_column_name.argtypes = [res_p, ctypes.c_int]
        lib.metrix_result_column_name.restype = ctypes.c_char_p
        lib.metrix_result_next.argtypes = [res_p]
        lib.metrix_result_next.restype = ctypes.c_bool
        lib.metrix_result_get_type.argtypes = [res_p, ctypes.c_int]
        lib.metrix_result_get_type.restype = ctypes.c_int

        # Cell accessors
        lib.metrix_result_get_string.argtypes = [res_p, ctypes.c_int]
        lib.metrix_result_get_string.restype = ctypes.c_char_p
        lib.metrix_result_get_int.argtypes = [res_p, ctypes.c_int]
        lib.metrix_result_get_int.restype = ctypes.c_int64
        lib.metrix_result_get_double.argtypes = [res_p, ctypes.c_int]
        lib.metrix_result_get_double.restype = ctypes.c_double
        lib.metrix_result_get_bool.argtypes = [res_p, ctypes.c_int]
        lib.metrix_result_get_bool.restype = ctypes.c_bool
        lib.metrix_result_get_node.argtypes = [res_p, ctypes.c_int, ctypes.POINTER(MetrixNode)]
        lib.metrix_result_get_node.restype = ctypes.c_bool
        lib.metrix_result_get_edge.argtypes = [res_p, ctypes.c_int, ctypes.POINTER(MetrixEdge)]
        lib.metrix_result_get_edge.restype = ctypes.c_bool
        lib.metrix_result_get_props_json.argtypes = [res_p, ctypes.c_int]
        lib.metrix_result_get_props_json.restype = ctypes.c_char_p

    def open(self, path: bytes) -> Optional[int]:
        return self._lib.metrix_open(path)

    def open_if_exists(self, path: bytes) -> Optional[int]:
        return self._lib.metrix_open_if_exists(path)

    def close(self, handle: int) -> None:
        self._lib.metrix_close(handle)

    def last_error(self) -> Optional[bytes]:
        return self._lib.metrix_get_last_error()

    def execute(self, handle: int, query: bytes) -> Optional[int]:
        return self._lib.metrix_execute(handle, query)

    def result_is_success(self, res: int) -> bool:
        return bool(self._lib.metrix_result_is_success(res))

    def result_get_error(self, res: int) -> Optional[bytes]:
        return self._lib.metrix_result_get_error(res)

    def result_close(self, res: int) -> None:
        self._lib.metrix_result_close(res)

    def result_column_count(self, res: int) -> int:
        return int(self._lib.metrix_result_column_count(res))

    def result_column_name(self, res: int, col: int) -> Optional[bytes]:
        return self._lib.metrix_result_column_name(res, col)

    def result_next(self, res: int) -> bool:
        return bool(self._lib.metrix_result_next(res))

    def result_get_type(self, res: int, col: int) -> int:
        return int(self._lib.metrix_result_get_type(res, col))

    def result_get_string(self, res: int, col: int) -> Optional[bytes]:
        return self._lib.metrix_result_get_string(res, col)

    def result_get_int(self, res: int, col: int) -> int:
        return int(self._lib.metrix_result_get_int(res, col))

    def result_get_double(self, res: int, col: int) -> float:
        return float(self._lib.metrix_result_get_double(res, col))

    def result_get_bool(self, res: int, col: int) -> bool:
        return bool(self._lib.metrix_result_get_bool(res, col))

    def result_get_node(self, res: int, col: int) -> Optional[MetrixNode]:
        raw = MetrixNode(0, None)
        if self._lib.metrix_result_get_node(res, col, ctypes.byref(raw)):
            return raw
        return None

    def result_get_edge(self, res: int, col: int) -> Optional[MetrixEdge]:
        raw = MetrixEdge(0, 0, 0, None)
        if self._lib.metrix_result_get_edge(res, col, ctypes.byref(raw)):
            return raw
        return None

    def result_get_props_json(self, res: int, col: int) -> Optional[bytes]:
        return self._lib.metrix_result_get_props_json(res, col)


_library: Optional[NativeLibrary] = None
_library_lock = threading.Lock()


def load_library() -> NativeLibrary:
    """Return the process-wide NativeLibrary, loading it on first use."""
    global _library
    with _library_lock:
        if _library is None:
            _library = NativeLibrary.load()
        return _library
