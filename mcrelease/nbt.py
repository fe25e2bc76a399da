# This file is part of MCRelease
# Copyright (C) 2019 Rodrigo Silva (MestreLion) <linux@rodrigosilva.com>
# License: GPLv3 or later, at your choice. See <http://www.gnu.org/licenses/gpl>

"""NBT handling

Wraps nbtlib, which provides the tag classes.

Reading and writing is done here instead of by nbtlib's parse() and write()
methods. Its parser reads past the end of the data as zeroes and thus silently
accepts truncated files, and both use standard UTF-8 for strings while Java
Edition uses Modified UTF-8: NUL as C0 80, and characters outside the BMP as
surrogate pairs. The reader below fails on any malformed input, reporting the
offset and the path of the offending tag.
"""

# No __all__, as being a wrapper it exports all imported names from the backend
# and all the ones defined here

# Delete ALL imported and declared names not meant for export, see the end of file
import gzip    as _gzip
import logging as _logging
import struct  as _struct
import typing  as t
import zlib    as _zlib

import numpy as _numpy
from mutf8.mutf8 import (
    decode_modified_utf8 as _decode_mutf8,
    encode_modified_utf8 as _encode_mutf8,
)

from nbtlib.tag import *
from nbtlib.tag import (
    Array,  # Not in __all__, but used by others
    Base,
    End,
    Byte,
    Short,
    Int,
    Long,
    Float,
    Double,
    ByteArray,
    String,
    List,
    Compound,
    IntArray,
    LongArray,
)

from . import util as _u

_log = _logging.getLogger(__name__)

# Concrete and (meant to be) instantiable tags, i.e. no Base, Numeric, End, etc
AnyTag: 't.TypeAlias' = t.Union[
    Byte,
    Short,
    Int,
    Long,
    Float,
    Double,
    ByteArray,
    String,
    List,
    Compound,
    IntArray,
    LongArray,
]
TagT = t.TypeVar('TagT', bound=Base)
RT = t.TypeVar('RT', bound='Root')

# Indexed by tag ID
TAG_TYPES: t.Tuple[t.Type[Base], ...] = (
    End,        # 0
    Byte,       # 1
    Short,      # 2
    Int,        # 3
    Long,       # 4
    Float,      # 5
    Double,     # 6
    ByteArray,  # 7
    String,     # 8
    List,       # 9
    Compound,   # 10
    IntArray,   # 11
    LongArray,  # 12
)

# Minecraft allows 512, too deep for the default Python recursion limit
MAX_DEPTH = 256

_UBYTE  = _struct.Struct('>B')
_USHORT = _struct.Struct('>H')
_INT    = _struct.Struct('>i')

_NUMERIC_FORMATS: t.Dict[t.Type[Base], _struct.Struct] = {
    Byte:   _struct.Struct('>b'),
    Short:  _struct.Struct('>h'),
    Int:    _INT,
    Long:   _struct.Struct('>q'),
    Float:  _struct.Struct('>f'),
    Double: _struct.Struct('>d'),
}
_ARRAY_DTYPES: t.Dict[t.Type[Base], '_numpy.dtype'] = {
    ByteArray: _numpy.dtype('>i1'),
    IntArray:  _numpy.dtype('>i4'),
    LongArray: _numpy.dtype('>i8'),
}


class Root(Compound):
    """Named Compound tag, the root tag in files"""

    __slots__ = (
        'root_name',
    )

    def __init__(self, *args, root_name: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.root_name: str = root_name

    def __repr__(self):
        name = f" {self.root_name!r}" if self.root_name else ""
        return f'<{self.__class__.__name__}{name} tags: {len(self)}>'


class _Reader:
    """Cursor over uncompressed NBT data, tracking the offset for error reports"""

    __slots__ = (
        'data',
        'offset',
    )

    def __init__(self, data: bytes):
        self.data: bytes = data
        self.offset: int = 0

    def read(self, size: int, what: str) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise _u.FormatError("Truncated data reading %s: %d bytes needed, %d left",
                                 what, size, len(self.data) - self.offset,
                                 offset=self.offset)
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, fmt: _struct.Struct, what: str):
        return fmt.unpack(self.read(fmt.size, what))[0]

    def string(self, what: str) -> str:
        length = self.unpack(_USHORT, f"length of {what}")
        start = self.offset
        raw = self.read(length, what)
        try:
            text = _decode_mutf8(raw)
        except (ValueError, IndexError) as e:
            raise _u.FormatError("Invalid Modified UTF-8 in %s: %s", what, e, offset=start) from e
        if any("\ud800" <= _ <= "\udfff" for _ in text):
            # Join surrogate pairs, keeping any lone surrogate as is
            text = text.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")
        return text

    def tag_type(self, what: str) -> t.Type[Base]:
        tag_id = self.unpack(_UBYTE, what)
        try:
            return TAG_TYPES[tag_id]
        except IndexError:
            raise _u.FormatError("Unknown tag type %d for %s", tag_id, what,
                                 offset=self.offset - 1) from None


def _path(parent: str, key: t.Union[str, int]) -> str:
    if isinstance(key, int):
        return f"{parent}[{key}]"
    return f"{parent}.{key}" if parent else key


def _parse_tag(reader: _Reader, tag_type: t.Type[Base], path: str, depth: int) -> Base:
    """Parse the payload of a tag whose type was already read"""
    if tag_type in _NUMERIC_FORMATS:
        return tag_type(reader.unpack(_NUMERIC_FORMATS[tag_type], path or "root"))

    if tag_type is String:
        return String(reader.string(path))

    if tag_type in _ARRAY_DTYPES:
        length = reader.unpack(_INT, f"length of {path}")
        if length < 0:
            raise _u.FormatError("Negative length %d for %s %s",
                                 length, tag_type.__name__, path, offset=reader.offset - 4)
        dtype = _ARRAY_DTYPES[tag_type]
        raw = reader.read(length * dtype.itemsize, path)
        return tag_type(_numpy.frombuffer(raw, dtype=dtype).copy())

    if depth >= MAX_DEPTH:
        raise _u.FormatError("Tags nested deeper than %d levels at %s", MAX_DEPTH, path,
                             offset=reader.offset)

    if tag_type is List:
        return _parse_list(reader, path, depth + 1)

    if tag_type is Compound:
        return _parse_compound(reader, path, depth + 1)

    # Only End gets here, as the only payload-less tag
    raise _u.FormatError("Unexpected %s tag at %s", tag_type.__name__, path,
                         offset=reader.offset)


def _parse_list(reader: _Reader, path: str, depth: int) -> List:
    subtype = reader.tag_type(f"element type of {path}")
    length = reader.unpack(_INT, f"length of {path}")
    if length <= 0:
        return new_list(subtype)
    if subtype is End:
        raise _u.FormatError("List %s has %d elements of type End", path, length,
                             offset=reader.offset - 4)
    return new_list(subtype, [_parse_tag(reader, subtype, _path(path, i), depth)
                              for i in range(length)])


def _parse_compound(reader: _Reader, path: str, depth: int,
                    cls: t.Type[Compound] = Compound) -> Compound:
    compound = cls()
    while True:
        tag_type = reader.tag_type(f"child of {path or 'root'}")
        if tag_type is End:
            return compound
        name = reader.string(f"tag name in {path or 'root'}")
        compound[name] = _parse_tag(reader, tag_type, _path(path, name), depth)


def new_list(subtype: t.Type[Base], items: t.Iterable[Base] = ()) -> List:
    """List of subtype elements. Keeps subtype even when there are no items"""
    if subtype is End:
        return List(items)
    return List[subtype](items)


def parse(data: bytes, cls: t.Type[RT] = Root) -> RT:
    """Parse uncompressed NBT data into a root Compound of class cls.

    Data must start with a named Compound. Raise FormatError on any malformed
    or truncated data, with the offset where parsing failed.
    """
    reader = _Reader(data)
    tag_type = reader.tag_type("root tag")
    if tag_type is not Compound:
        raise _u.FormatError("Non-Compound root tag is not supported: %s",
                             tag_type.__name__, offset=0)
    name = reader.string("root name")
    try:
        root = _parse_compound(reader, "", 1, cls=cls)
    except RecursionError:
        raise _u.FormatError("Tags nested too deep", offset=reader.offset) from None
    root.root_name = name
    if reader.offset < len(data):
        _log.debug("Ignoring %d bytes after root tag", len(data) - reader.offset)
    return root


def decode(fileobj: t.BinaryIO, cls: t.Type[RT] = Root) -> RT:
    """Decompress and parse a gzipped NBT file object.

    Compression errors raise WorldIOError, parsing errors FormatError.
    """
    try:
        with _gzip.GzipFile(fileobj=fileobj, mode='rb') as gz:
            data = gz.read()
    except (OSError, EOFError, _zlib.error) as e:
        raise _u.WorldIOError("Cannot decompress NBT data: %s", e) from e
    return parse(data, cls=cls)


def _split_surrogates(text: str) -> str:
    """Characters outside the BMP as UTF-16 surrogate pairs, as Java strings hold them"""
    if all(_ <= "\uffff" for _ in text):
        return text
    return "".join(_ if _ <= "\uffff" else
                   chr(0xD7C0 + (ord(_) >> 10)) + chr(0xDC00 + (ord(_) & 0x3FF))
                   for _ in text)


def _write_string(chunks: t.List[bytes], text: str, what: str) -> None:
    data = _encode_mutf8(_split_surrogates(text))
    if len(data) > 0xFFFF:
        raise _u.FormatError("String too long for %s: %d bytes", what, len(data))
    chunks.append(_USHORT.pack(len(data)))
    chunks.append(data)


def _tag_type(tag: Base, path: str) -> t.Type[Base]:
    try:
        return TAG_TYPES[tag.tag_id]
    except (AttributeError, IndexError):
        raise TypeError(f"Not an NBT tag at {path or 'root'}: {type(tag).__name__}") from None


def _serialize_tag(chunks: t.List[bytes], tag: Base, tag_type: t.Type[Base], path: str) -> None:
    """Append the payload of tag, the structural inverse of _parse_tag()"""
    if tag_type in _NUMERIC_FORMATS:
        chunks.append(_NUMERIC_FORMATS[tag_type].pack(tag))
        return

    if tag_type is String:
        _write_string(chunks, tag, path)
        return

    if tag_type in _ARRAY_DTYPES:
        array = _numpy.asarray(tag, dtype=_ARRAY_DTYPES[tag_type])
        chunks.append(_INT.pack(len(array)))
        chunks.append(array.tobytes())
        return

    if tag_type is List:
        subtype = type(tag).subtype
        chunks.append(_UBYTE.pack(subtype.tag_id))
        chunks.append(_INT.pack(len(tag)))
        for i, item in enumerate(tag):
            _serialize_tag(chunks, item, TAG_TYPES[subtype.tag_id], _path(path, i))
        return

    if tag_type is Compound:
        for name, child in tag.items():
            child_path = _path(path, name)
            child_type = _tag_type(child, child_path)
            chunks.append(_UBYTE.pack(child_type.tag_id))
            _write_string(chunks, name, f"tag name in {path or 'root'}")
            _serialize_tag(chunks, child, child_type, child_path)
        chunks.append(_UBYTE.pack(End.tag_id))
        return

    raise TypeError(f"Cannot write {tag_type.__name__} tag at {path or 'root'}")


def serialize(root: Compound, root_name: t.Optional[str] = None) -> bytes:
    """Uncompressed NBT data for root as a named Compound, the inverse of parse().

    If root_name is None, use root.root_name if root is a Root, or an empty name.
    Strings are written in Java's Modified UTF-8.
    """
    if root_name is None:
        root_name = getattr(root, 'root_name', "")
    if not isinstance(root, Compound):
        raise TypeError(f"Root tag must be a Compound, not {type(root).__name__}")
    chunks: t.List[bytes] = [_UBYTE.pack(Compound.tag_id)]
    _write_string(chunks, root_name, "root name")
    _serialize_tag(chunks, root, Compound, "")
    return b"".join(chunks)


def encode(fileobj: t.BinaryIO, root: Compound, root_name: t.Optional[str] = None) -> None:
    """Write root as a named, gzipped Compound. See serialize()"""
    data = serialize(root, root_name=root_name)
    try:
        with _gzip.GzipFile(fileobj=fileobj, mode='wb') as gz:
            gz.write(data)
    except (OSError, _zlib.error) as e:
        raise _u.WorldIOError("Cannot write NBT data: %s", e) from e


def _open(filename: _u.AnyPath, mode: str) -> t.BinaryIO:
    try:
        return open(filename, mode)
    except OSError as e:
        raise _u.WorldIOError("Cannot open %r: %s", str(filename), e) from e


def load(filename: _u.AnyPath, cls: t.Type[RT] = Root) -> RT:
    with _open(filename, 'rb') as fileobj:
        return decode(fileobj, cls=cls)


def save(root: Compound, filename: _u.AnyPath, root_name: t.Optional[str] = None) -> None:
    with _open(filename, 'wb') as fileobj:
        encode(fileobj, root, root_name=root_name)


def get_tag(compound: Compound, key: str, tag_type: t.Type[TagT]) -> TagT:
    """Return compound[key], checking it is a tag_type.

    Raise MissingKey if there is no such key, TypeMismatch if it exists but is
    of another type. Both are MCError, and also KeyError and TypeError respectively
    """
    try:
        tag = compound[key]
    except KeyError:
        raise _u.MissingKey(key) from None
    if not isinstance(tag, tag_type):
        raise _u.TypeMismatch(key, tag_type, type(tag))
    return tag


del t
