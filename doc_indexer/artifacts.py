"""
Binary dictionary artifacts

Compiled dictionaries are stored as uncompressed NumPy ``.npz``
archives: a small header (magic, kind, format version) plus column
arrays. Strings are kept as length-prefixed tables (a UTF-8 blob and
an offsets array) so one long word never widens the other entries.
Loading reads plain arrays without unpickling anything, and lookups
are binary searches over the sorted key table.
"""

import os
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Iterator, Union

import numpy as np

from .errors import ArtifactError

ARTIFACT_MAGIC = "doc_indexer"
FORMAT_VERSION = 2

_HEADER_FIELDS = ('magic', 'kind', 'version')

PathLike = Union[str, Path]


def write_artifact(path: PathLike, kind: str, columns: Dict[str, np.ndarray]) -> Path:
    """
    Write a versioned artifact

    The archive is written to a temporary sibling first and then
    renamed, so readers never observe a partial file.

    Args:
        path: Output file
        kind: Artifact kind checked on load ('lemmas', 'frequencies')
        columns: Column arrays, the first one being the sorted key column

    Returns:
        The output path
    """
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    clashes = set(columns) & set(_HEADER_FIELDS)
    if clashes:
        raise ValueError(f"Reserved column names: {sorted(clashes)}")

    tmp_path = path.with_name(path.name + '.tmp')
    with open(tmp_path, 'wb') as f:
        np.savez(
            f,
            magic=np.array(ARTIFACT_MAGIC),
            kind=np.array(kind),
            version=np.array(FORMAT_VERSION, dtype=np.uint32),
            **columns
        )
    os.replace(tmp_path, path)
    return path


def read_artifact(path: PathLike, kind: str) -> Dict[str, np.ndarray]:
    """
    Read and validate an artifact written by write_artifact()

    Raises:
        FileNotFoundError: path does not exist
        ArtifactError: not an artifact, wrong kind or unsupported version
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {path}")

    try:
        with np.load(path, allow_pickle=False) as archive:
            data = {name: archive[name] for name in archive.files}
    except (ValueError, OSError, zipfile.BadZipFile) as e:
        raise ArtifactError(f"Unreadable artifact {path}: {e}") from e

    missing = [name for name in _HEADER_FIELDS if name not in data]
    if missing:
        raise ArtifactError(f"{path} is not a dictionary artifact (missing {missing})")
    if str(data['magic']) != ARTIFACT_MAGIC:
        raise ArtifactError(f"{path} is not a dictionary artifact")
    if str(data['kind']) != kind:
        raise ArtifactError(f"{path} holds '{data['kind']}', expected '{kind}'")
    version = int(data['version'])
    if version != FORMAT_VERSION:
        raise ArtifactError(
            f"{path} has format version {version}, this build reads {FORMAT_VERSION}"
        )

    for name in _HEADER_FIELDS:
        del data[name]
    return data


class StringTable:
    """
    Read-only sequence of strings stored length-prefixed

    Every string is UTF-8 encoded back to back into one byte blob and
    entry i is blob[offsets[i]:offsets[i + 1]], so the storage cost is
    the total text length plus 8 bytes per entry. UTF-8 byte order is
    code point order: a table built from sorted strings can be binary
    searched on raw bytes without decoding.
    """

    def __init__(self, blob: np.ndarray, offsets: np.ndarray):
        if len(offsets) == 0 or int(offsets[0]) != 0 or int(offsets[-1]) != len(blob):
            raise ArtifactError("Corrupt string table: offsets do not match the blob")
        self._blob = blob.astype(np.uint8, copy=False)
        self._offsets = offsets.astype(np.uint64, copy=False)
        self._data = self._blob.tobytes()

    @classmethod
    def from_strings(cls, values: Iterable[str]) -> 'StringTable':
        encoded = [value.encode('utf-8') for value in values]
        offsets = np.zeros(len(encoded) + 1, dtype=np.uint64)
        if encoded:
            offsets[1:] = np.cumsum(np.array([len(e) for e in encoded], dtype=np.uint64))
        blob = np.frombuffer(b''.join(encoded), dtype=np.uint8)
        return cls(blob, offsets)

    @classmethod
    def from_columns(cls, data: Dict[str, np.ndarray], name: str) -> 'StringTable':
        """Rebuild the table saved under name by columns()"""
        try:
            return cls(data[f'{name}_blob'], data[f'{name}_offsets'])
        except KeyError as e:
            raise ArtifactError(f"Artifact has no string table column {e}") from e

    def columns(self, name: str) -> Dict[str, np.ndarray]:
        return {f'{name}_blob': self._blob, f'{name}_offsets': self._offsets}

    def _raw(self, index: int) -> bytes:
        return self._data[int(self._offsets[index]):int(self._offsets[index + 1])]

    def __len__(self) -> int:
        return len(self._offsets) - 1

    def __getitem__(self, index: int) -> str:
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError(f"String table index out of range: {index}")
        return self._raw(index).decode('utf-8')

    def __iter__(self) -> Iterator[str]:
        data = self._data
        bounds = self._offsets.tolist()
        for start, end in zip(bounds, bounds[1:]):
            yield data[start:end].decode('utf-8')

    def find(self, value: str) -> int:
        """Position of value in a sorted table, or -1"""
        target = value.encode('utf-8')
        lo, hi = 0, len(self)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._raw(mid) < target:
                lo = mid + 1
            else:
                hi = mid
        if lo < len(self) and self._raw(lo) == target:
            return lo
        return -1
