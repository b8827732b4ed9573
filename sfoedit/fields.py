"""
A Field knows how to convert a single value from/to its binary representation
at a given position of a buffer: it's the "fundamental" datatype from the layout
point of view.

There is exactly one class for each member of FieldType, use field_for() to
obtain the right one.
"""
import logging
import struct
from collections.abc import Mapping

from .enum import FieldType
from .exceptions import (
    PackException,
    UnpackException,
    UnsupportedFieldTypeException,
)


class Field(object):
    """Base class to subclass from"""

    def __init__(self, size=None, default=None):
        self.logger = logging.getLogger(__name__)
        self._size = size or 0
        self.default = default

    def __repr__(self):
        return '<%s(size=%d)>' % (self.__class__.__name__, self.size)

    def value_from_default(self):
        return self.default

    def _get_size(self):
        return self._size

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _check_room(self, buffer, start, length):
        if start < 0 or start + length > len(buffer):
            raise PackException(
                message=f'{length} bytes at offset {start} don\'t fit into a buffer of {len(buffer)} bytes')

    def unpack(self, buffer, start, end):
        raise NotImplementedError(f"method {self.__class__.__name__}.unpack() not implemented")

    def pack(self, value, buffer, start):
        raise NotImplementedError(f"method {self.__class__.__name__}.pack() not implemented")


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes, always little endian.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.format)

    def get_format(self):
        return '<%s' % self.format

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def unpack(self, buffer, start, end=None):
        try:
            return struct.unpack_from(self.get_format(), buffer, start)[0]
        except struct.error as e:
            self.logger.error(e)
            raise UnpackException(message=str(e))

    def pack(self, value, buffer, start):
        try:
            struct.pack_into(self.get_format(), buffer, start, value)
        except struct.error as e:
            raise PackException(message=f'can\'t pack {value!r} as \'{self.format}\': {e}')


class MemoryAddressField(StructField):
    """An address is unpacked as an integer but it's possible to pack
    it also from a record exposing the address as "start"."""

    def __init__(self, **kw):
        super().__init__('Q', **kw)

    @staticmethod
    def get_address(value):
        if isinstance(value, int):
            return value

        if isinstance(value, Mapping):
            return value['start']

        return value.start

    def pack(self, value, buffer, start):
        try:
            address = self.get_address(value)
        except (KeyError, AttributeError):
            raise PackException(message=f'{value!r} is not an address nor has a "start"')

        super().pack(address, buffer, start)


class RawField(Field):
    """Represent a contiguous chunk of bytes."""

    def __repr__(self):
        return '<%s(%d)>' % (self.__class__.__name__, self.size)

    def value_from_default(self):
        return b'\x00' * self.size if self.default is None else self.default

    def unpack(self, buffer, start, end):
        return bytes(buffer[start:end])

    def pack(self, value, buffer, start):
        """The length is not checked: the caller must give the right amount of data,
        anything beyond the size of the field is ignored."""
        if isinstance(value, int):
            raise PackException(message=f'can\'t convert {value!r} to bytes')

        try:
            raw = bytes(value)
        except (TypeError, ValueError) as e:
            raise PackException(message=f'can\'t convert {value!r} to bytes: {e}')

        if self.size:
            raw = raw[:self.size]

        self._check_room(buffer, start, len(raw))
        buffer[start:start + len(raw)] = raw


class StringField(Field):
    """Null terminated string: when unpacking the string stops at the first
    zero byte, when packing the padding is left to the (zero filled) buffer."""

    encoding = None

    def __init__(self, errors='strict', **kw):
        self.errors = errors
        super().__init__(**kw)

    def value_from_default(self):
        return '' if self.default is None else self.default

    def unpack(self, buffer, start, end=None):
        end = len(buffer) if end is None else min(end, len(buffer))
        terminator = buffer.find(b'\x00', start, end)
        if terminator != -1:
            end = terminator

        try:
            return bytes(buffer[start:end]).decode(self.encoding, self.errors)
        except UnicodeDecodeError as e:
            raise UnpackException(message=f'invalid {self.encoding} string at offset {start}: {e}')

    def encode(self, value):
        try:
            raw = value.encode(self.encoding, self.errors)
        except (AttributeError, UnicodeEncodeError) as e:
            raise PackException(message=f'can\'t encode {value!r} as {self.encoding}: {e}')

        if self.size and len(raw) > self.size:
            # don't leave half of a multibyte character at the end
            raw = raw[:self.size].decode(self.encoding, 'ignore').encode(self.encoding, self.errors)

        return raw

    def pack(self, value, buffer, start):
        raw = self.encode(value)

        self._check_room(buffer, start, len(raw))
        buffer[start:start + len(raw)] = raw


class AsciiField(StringField):
    encoding = 'ascii'


class Utf8Field(StringField):
    encoding = 'utf-8'


class ReferenceField(Field):
    """Un/Pack a whole record using another layout."""

    def __init__(self, layout, **kw):
        self.layout = layout
        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.layout.name)

    def _get_size(self):
        return self.layout.size

    def value_from_default(self):
        return {} if self.default is None else self.default

    def unpack(self, buffer, start, end=None):
        return self.layout.from_buffer(buffer, start)

    def pack(self, value, buffer, start):
        raw = self.layout.to_buffer(value or {})

        self._check_room(buffer, start, len(raw))
        buffer[start:start + len(raw)] = raw


type2field = {
    FieldType.RAW:            (RawField, (), {}),
    FieldType.ASCII:          (AsciiField, (), {}),
    FieldType.UTF8:           (Utf8Field, (), {}),
    FieldType.UINT16:         (StructField, ('H',), {}),
    FieldType.UINT32:         (StructField, ('I',), {}),
    FieldType.UINT64:         (StructField, ('Q',), {}),
    FieldType.INT16:          (StructField, ('h',), {}),
    FieldType.INT32:          (StructField, ('i',), {}),
    FieldType.INT64:          (StructField, ('q',), {}),
    FieldType.MEMORY_ADDRESS: (MemoryAddressField, (), {}),
    FieldType.REFERENCE:      (ReferenceField, (), {}),
}


def field_for(field_type, size=None, default=None, layout=None, errors=None):
    """Instantiate the field handling the given type.

    Fixed width types ignore the size, references take it from the layout;
    errors is the codec error handler of the string types."""
    try:
        field_type = FieldType(field_type)
        field_class, args, kwargs = type2field[field_type]
    except (ValueError, KeyError):
        raise UnsupportedFieldTypeException(field_type)

    kwargs = dict(kwargs)
    if default is not None:
        kwargs['default'] = default

    if field_type is FieldType.REFERENCE:
        if layout is None:
            raise ValueError('a reference field needs a layout')
        return field_class(layout, *args, **kwargs)

    if not issubclass(field_class, StructField):
        kwargs['size'] = size

    if errors is not None and issubclass(field_class, StringField):
        kwargs['errors'] = errors

    return field_class(*args, **kwargs)
