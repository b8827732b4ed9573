'''
# System File Object

Container of key/value metadata (PARAM.SFO). The general structure is the following

  .-----------------------.
  | header                |  magic, version, offsets of the tables, number of entries
  | index table           |  one entry for each key/value pair
  | key table             |  null terminated keys, aligned to 4 bytes
  | data table            |  values, each one "param_max_length" bytes long
  '-----------------------'

The offsets in the index table are relative to the start of the key and data
tables respectively; all the integers are little endian.

Reference to <https://www.psdevwiki.com/ps4/Param.sfo>.
'''
import logging
from typing import Dict, List, Optional

from ..core import LayoutRegistry
from ..enum import Compliant, FieldType
from ..exceptions import (
    EntryNotFoundException,
    LayoutUnpackException,
    MagicException,
    UnpackException,
)
from ..meta import FieldDescriptor
from ..streams import Stream
from .. import fields
from . import params


SFO_HEADER        = 'SFOHeader'
INDEX_TABLE_ENTRY = 'IndexTableEntry'

SFO_MAGIC   = b'\x00PSF'
SFO_VERSION = b'\x01\x01\x00\x00'

KEY_TABLE_ALIGNMENT = 4


def register_layouts(registry: LayoutRegistry):
    '''Create (if needed) the layouts of the format and return them'''
    header = registry.create(SFO_HEADER, [
        FieldDescriptor('magic',             FieldType.RAW, size=4, default=SFO_MAGIC),
        FieldDescriptor('version',           FieldType.RAW, size=4, default=SFO_VERSION),
        FieldDescriptor('key_table_offset',  FieldType.INT32),
        FieldDescriptor('data_table_offset', FieldType.INT32),
        FieldDescriptor('entry_count',       FieldType.INT32),
    ])

    index_table_entry = registry.create(INDEX_TABLE_ENTRY, [
        FieldDescriptor('key_offset',       FieldType.UINT16),  # relative to the key table
        FieldDescriptor('param_format',     FieldType.UINT16),
        FieldDescriptor('param_length',     FieldType.UINT32),
        FieldDescriptor('param_max_length', FieldType.UINT32),
        FieldDescriptor('data_offset',      FieldType.UINT32),  # relative to the data table
    ])

    return header, index_table_entry


def align(value: int, alignment: int = KEY_TABLE_ALIGNMENT) -> int:
    if value % alignment:
        return value + (alignment - (value % alignment))

    return value


def key_size(key: str) -> int:
    '''Bytes occupied by the key into the key table'''
    return len(key.encode('utf-8')) + 1


class SfoDocument(object):
    '''In memory representation of a SFO file.

    The keys are fixed by the loaded file: it's only possible to change the
    value of an existing entry with edit_entry(). When exporting, the tables
    are rebuilt from scratch with the keys sorted alphabetically.

    The entries with an unknown param format are not decoded: they don't
    appear in "entries" but their data is kept as is (or, with
    Compliant.PARAM_FORMAT, the loading fails).
    '''

    def __init__(self, registry: LayoutRegistry = None, compliant=Compliant.NONE):
        self.logger = logging.getLogger(__name__)
        self.registry = registry if registry is not None else LayoutRegistry()
        self.compliant = compliant
        self._header_layout, self._index_layout = register_layouts(self.registry)
        self._key_field = fields.field_for(FieldType.UTF8)

        self._header = {_.name: _.default for _ in self._header_layout.get_fields()}
        self._index: List[dict] = []
        self._entries: Dict[str, object] = {}
        self._opaque: Dict[str, bytes] = {}
        self._mapping: Dict[str, int] = {}

    def __str__(self):
        msg = ''
        for key in self.keys():
            msg += '%s: %r\n' % (key, self[key])
        return msg

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(self.keys()))

    def __len__(self):
        return len(self._index)

    def __contains__(self, key):
        return key in self._mapping

    def __getitem__(self, key):
        '''Return the value of the entry; the data of the entries not decoded
        is returned as raw bytes.'''
        if key not in self._mapping:
            raise EntryNotFoundException(key)

        if key in self._entries:
            return self._entries[key]

        return self._opaque[key]

    def keys(self) -> List[str]:
        '''The keys in the order of the index table'''
        return sorted(self._mapping, key=lambda _: self._mapping[_])

    @property
    def header(self) -> dict:
        return dict(self._header)

    @property
    def entries(self) -> dict:
        '''The decoded values indexed by key'''
        return dict(self._entries)

    def get_index(self, key: str) -> dict:
        if key not in self._mapping:
            raise EntryNotFoundException(key)

        return dict(self._index[self._mapping[key]])

    def get_type(self, key: str) -> Optional[FieldType]:
        index_entry = self.get_index(key)

        return params.get_entry_type(key, index_entry['param_format'])

    def show(self):
        print(self, end='')

    def check_magic(self, header):
        if header['magic'] != SFO_MAGIC:
            self.logger.warning(f'the magic {header["magic"]!r} doesn\'t correspond')
            if self.compliant & Compliant.MAGIC:
                raise MagicException(chain=['magic'], message=f'expected {SFO_MAGIC!r}, found {header["magic"]!r}')

    def load(self, path):
        '''Load the SFO from a path (or directly from bytes)'''
        return self.load_from_buffer(Stream(path).read_all())

    @staticmethod
    def _get_value_size(entry_type, index_entry):
        if entry_type is FieldType.RAW:
            return index_entry['param_length']

        return index_entry['param_max_length']

    def _read_key(self, buffer, start, position):
        if not 0 <= start < len(buffer):
            raise UnpackException(chain=[position], message=f'key offset {start} is outside of the buffer')

        try:
            return self._key_field.unpack(buffer, start)
        except UnpackException as e:
            raise LayoutUnpackException(chain=[position] + e.chain, message=e.message) from e

    def _read_value(self, key, entry_type, index_entry, buffer, start):
        if not 0 <= start <= len(buffer):
            raise UnpackException(chain=[key], message=f'data offset {start} is outside of the buffer')

        size = self._get_value_size(entry_type, index_entry)
        field = fields.field_for(entry_type, size=size, errors=params.STRING_ERRORS)

        try:
            return field.unpack(buffer, start, start + size)
        except UnpackException as e:
            raise LayoutUnpackException(chain=[key] + e.chain, message=e.message) from e

    def load_from_buffer(self, buffer):
        '''Decode the whole file; the previous state is replaced only
        if everything goes well.'''
        if not isinstance(buffer, (bytes, bytearray, memoryview)):
            raise TypeError(f'expected a bytes-like object, not {buffer.__class__.__name__}')

        buffer = bytes(buffer)

        header = self._header_layout.from_buffer(buffer)
        self.check_magic(header)

        entry_count = header['entry_count']
        if entry_count < 0:
            raise UnpackException(chain=['entry_count'], message=f'invalid number of entries {entry_count}')

        self.logger.debug('header: %r', header)

        index = []
        entries = {}
        opaque = {}
        mapping = {}

        index_table_offset = self._header_layout.size
        for idx in range(entry_count):
            position = f'index[{idx}]'
            offset = index_table_offset + (idx * self._index_layout.size)

            try:
                index_entry = self._index_layout.from_buffer(buffer, offset)
            except UnpackException as e:
                raise LayoutUnpackException(chain=[position] + e.chain, message=e.message) from e

            key = self._read_key(buffer, header['key_table_offset'] + index_entry['key_offset'], position)
            if key in mapping:
                raise UnpackException(chain=[position], message=f'the key \'{key}\' is duplicated')

            mapping[key] = idx
            index.append(index_entry)

            data_offset = header['data_table_offset'] + index_entry['data_offset']
            param_format = index_entry['param_format']
            entry_type = params.get_entry_type(key, param_format)

            if entry_type is None:
                self.logger.warning(f'unknown param format 0x{param_format:04x} for \'{key}\'')
                if self.compliant & Compliant.PARAM_FORMAT:
                    raise UnpackException(chain=[key], message=f'unknown param format 0x{param_format:04x}')

                opaque[key] = self._read_value(key, FieldType.RAW, {
                    'param_length': index_entry['param_max_length'],
                }, buffer, data_offset)
                continue

            entries[key] = self._read_value(key, entry_type, index_entry, buffer, data_offset)
            self.logger.debug('entry \'%s\' (%s) = %r', key, entry_type, entries[key])

        self._header = header
        self._index = index
        self._entries = entries
        self._opaque = opaque
        self._mapping = mapping

    def edit_entry(self, key: str, value):
        '''Change the value of an existing entry after validating it; the offsets
        are recalculated only by export().'''
        if key not in self._mapping:
            raise EntryNotFoundException(key)

        index_entry = self._index[self._mapping[key]]
        entry_type, value = params.validate(key, value, index_entry)

        self._entries[key] = value
        if entry_type is FieldType.UTF8:
            index_entry['param_length'] = params.encoded_length(key, value) + 1

        self.logger.debug('edited \'%s\' = %r', key, value)

    def _write_value(self, key, index_entry, buffer, start):
        entry_type = params.get_entry_type(key, index_entry['param_format'])
        if entry_type is None:
            entry_type, value = FieldType.RAW, self._opaque[key]
        else:
            value = self._entries[key]

        size = index_entry['param_max_length']
        if entry_type is FieldType.RAW:
            size = min(len(value), size)

        fields.field_for(entry_type, size=size, errors=params.STRING_ERRORS).pack(value, buffer, start)

    def export(self) -> bytes:
        '''Build the binary representation of the document.

        The layout is recalculated from scratch: the keys are written in
        alphabetical order with the index table following the same order.'''
        entry_count = len(self._index)

        index_table_offset = self._header_layout.size
        key_table_offset = index_table_offset + (self._index_layout.size * entry_count)
        key_table_size = align(sum(key_size(_) for _ in self._mapping))
        data_table_offset = key_table_offset + key_table_size
        data_table_size = sum(_['param_max_length'] for _ in self._index)

        buffer = bytearray(data_table_offset + data_table_size)

        header = dict(self._header)
        header['key_table_offset'] = key_table_offset
        header['data_table_offset'] = data_table_offset
        header['entry_count'] = entry_count

        self._header_layout.to_buffer(header, buffer)

        index = [dict(_) for _ in self._index]

        index_offset = index_table_offset
        key_offset = 0
        data_offset = 0
        for key in sorted(self._mapping):
            index_entry = index[self._mapping[key]]

            index_entry['key_offset'] = key_offset
            index_entry['data_offset'] = data_offset

            self.logger.debug('exporting \'%s\' with key at %08x and data at %08x', key, key_offset, data_offset)

            self._index_layout.to_buffer(index_entry, buffer, index_offset)
            self._key_field.pack(key, buffer, key_table_offset + key_offset)
            self._write_value(key, index_entry, buffer, data_table_offset + data_offset)

            key_offset += key_size(key)
            data_offset += index_entry['param_max_length']
            index_offset += self._index_layout.size

        self._header = header
        self._index = index

        return bytes(buffer)
