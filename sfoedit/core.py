"""
Core module for the description of a binary layout

"""
import logging
from types import MappingProxyType
from typing import Dict, List, Tuple

from .enum import FieldType
from .meta import FieldDescriptor
from .exceptions import (
    LayoutNotFoundException,
    LayoutUnpackException,
    PackException,
    UnpackException,
)


class Layout(object):
    """
    Named and immutable description of a record: its main attributes are
    the ordered fields, the offset of each one and the total size.

    A field without an explicit offset is placed where the previous one ends,
    an explicit offset is relative to the start of the record.
    """

    def __init__(self, name: str, descriptors: List[FieldDescriptor], minimum_size: int = 0):
        self.logger = logging.getLogger(__name__)
        self.name = name
        self._descriptors = tuple(descriptors)

        offsets = {}
        cursor = 0
        for descriptor in self._descriptors:
            if descriptor.name in offsets:
                raise ValueError(f'field {descriptor.name} is already present in layout {name}')

            if descriptor.offset is not None:
                cursor = descriptor.offset

            offsets[descriptor.name] = cursor
            cursor += descriptor.size

        self._offsets = MappingProxyType(offsets)
        self.size = max(minimum_size, cursor)

    def __repr__(self):
        msg = []
        for descriptor in self._descriptors:
            msg.append('%s=%s' % (descriptor.name, repr(descriptor.field)))
        return '<%s %s(%s)>' % (self.__class__.__name__, self.name, ','.join(msg))

    def __len__(self):
        return self.size

    def get_ordered_fields_name(self) -> List[str]:
        return [_.name for _ in self._descriptors]

    def get_fields(self) -> Tuple[FieldDescriptor, ...]:
        return self._descriptors

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        for descriptor in self._descriptors:
            result[descriptor.name] = (self._offsets[descriptor.name], descriptor.size)

        return result

    def from_buffer(self, buffer, start: int = 0) -> dict:
        '''Decode the record starting at "start" and return a dictionary
        with a value for each field.'''
        available = len(buffer) - start
        if available < self.size:
            raise UnpackException(
                message=f'layout \'{self.name}\' needs {self.size} bytes but only {available} are available')

        obj = {}
        for descriptor in self._descriptors:
            offset = start + self._offsets[descriptor.name]
            self.logger.debug('unpacking %s.%s at offset %08x', self.name, descriptor.name, offset)

            try:
                obj[descriptor.name] = descriptor.field.unpack(buffer, offset, offset + descriptor.size)
            except UnpackException as e:
                raise LayoutUnpackException(chain=[descriptor.name] + e.chain, message=e.message) from e

        return obj

    def to_buffer(self, dataset, buffer=None, start: int = 0) -> bytearray:
        '''Encode the dataset; the missing values are taken from the defaults.

        If a buffer is passed it must be a zero filled bytearray large enough, it's
        modified in place and returned.'''
        if buffer is None:
            buffer = bytearray(self.size)

        available = len(buffer) - start
        if available < self.size:
            raise PackException(
                message=f'layout \'{self.name}\' needs {self.size} bytes but only {available} are available')

        for descriptor in self._descriptors:
            offset = start + self._offsets[descriptor.name]
            value = dataset.get(descriptor.name)
            if value is None:
                value = descriptor.default

            self.logger.debug('packing %s.%s at offset %08x', self.name, descriptor.name, offset)

            try:
                descriptor.field.pack(value, buffer, offset)
            except PackException as e:
                raise PackException(chain=[descriptor.name] + e.chain, message=e.message) from e

        return buffer


class LayoutRegistry(object):
    """Container of the known layouts, indexed by name.

    A layout can reference only layouts already registered, so the dependencies
    must be created before."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._layouts: Dict[str, Layout] = {}

    def __contains__(self, name):
        return name in self._layouts

    def __len__(self):
        return len(self._layouts)

    def get(self, name: str) -> Layout:
        try:
            return self._layouts[name]
        except KeyError:
            raise LayoutNotFoundException(name)

    def create(self, name: str, requirements, minimum_size: int = 0) -> Layout:
        '''Build and register a new layout.

        The requirements are FieldDescriptor instances or dictionaries like

            {
                'name': 'entryCount',
                'type': 'int32',
                'size': None,       # mandatory only for raw and strings
                'offset': None,     # explicit offset
                'default': None,
                'layout': None,     # layout name for the references
            }

        If a layout with the same name already exists that one is returned
        and the requirements are ignored.
        '''
        if name in self._layouts:
            self.logger.debug('layout \'%s\' already registered', name)
            return self._layouts[name]

        descriptors = []
        for requirement in requirements:
            descriptor = FieldDescriptor.from_requirement(requirement)

            reference = None
            if descriptor.type is FieldType.REFERENCE:
                reference = self.get(descriptor.layout)

            descriptors.append(descriptor.create(reference=reference))

        layout = Layout(name, descriptors, minimum_size=minimum_size)
        self.logger.debug('registered layout %r of size %d', layout, layout.size)
        self._layouts[name] = layout

        return layout
