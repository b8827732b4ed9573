import pytest

from sfoedit.core import Layout, LayoutRegistry
from sfoedit.enum import FieldType
from sfoedit.meta import FieldDescriptor
from sfoedit.exceptions import (
    LayoutNotFoundException,
    LayoutUnpackException,
    PackException,
    UnpackException,
    UnsupportedFieldTypeException,
)


def test_layout():
    """Check that building a Layout from fields behaves correctly."""
    registry = LayoutRegistry()
    dummy = registry.create('Dummy', [
        FieldDescriptor('a', FieldType.UINT32, default=0xbad),
        FieldDescriptor('b', FieldType.RAW, size=0x10),
        FieldDescriptor('c', FieldType.UINT32, default=0xdeadbeef),
    ])

    assert isinstance(dummy, Layout)
    assert dummy.size == 0x18
    assert dummy.get_ordered_fields_name() == ['a', 'b', 'c']
    assert dummy.layout == {
        'a': (0x00, 4),
        'b': (0x04, 0x10),
        'c': (0x14, 4),
    }

    raw = dummy.to_buffer({})

    assert len(raw) == dummy.size
    assert raw == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'\xef\xbe\xad\xde'
    )
    assert dummy.from_buffer(raw) == {
        'a': 0xbad,
        'b': b'\x00' * 0x10,
        'c': 0xdeadbeef,
    }


def test_layout_from_mappings():
    registry = LayoutRegistry()
    tlv = registry.create('TLV', [
        {'name': 'type', 'type': 'uint16'},
        {'name': 'length', 'type': 'uint16'},
        {'name': 'data', 'type': 'ascii', 'size': 8},
    ])

    raw = tlv.to_buffer({'type': 1, 'length': 5, 'data': 'kebab'})

    assert raw == b'\x01\x00\x05\x00kebab\x00\x00\x00'
    assert tlv.from_buffer(raw) == {'type': 1, 'length': 5, 'data': 'kebab'}


def test_explicit_offset():
    '''the fields after an explicit offset continue from there'''
    registry = LayoutRegistry()
    dummy = registry.create('Dummy', [
        FieldDescriptor('a', FieldType.UINT16),
        FieldDescriptor('b', FieldType.UINT32, offset=8),
        FieldDescriptor('c', FieldType.UINT16),
    ])

    assert dummy.layout == {
        'a': (0, 2),
        'b': (8, 4),
        'c': (12, 2),
    }
    assert dummy.size == 14

    contents = b'\xaa\xaa' + b'\x00' * 6 + b'\x01\x02\x03\x04' + b'\x0a\x0b'

    assert dummy.from_buffer(contents) == {'a': 0xaaaa, 'b': 0x04030201, 'c': 0x0b0a}
    assert dummy.to_buffer({'a': 0xaaaa, 'b': 0x04030201, 'c': 0x0b0a}) == contents

    # the offsets are relative to the start of the record
    assert dummy.from_buffer(b'\xff\xff' + contents, start=2) == {'a': 0xaaaa, 'b': 0x04030201, 'c': 0x0b0a}


def test_minimum_size():
    registry = LayoutRegistry()
    dummy = registry.create('Dummy', [
        FieldDescriptor('a', FieldType.UINT32),
    ], minimum_size=0x10)

    assert dummy.size == 0x10
    assert dummy.to_buffer({'a': 1}) == b'\x01' + b'\x00' * 0x0f

    small = registry.create('Small', [
        FieldDescriptor('a', FieldType.UINT64),
    ], minimum_size=4)

    assert small.size == 8


def test_from_buffer_too_short():
    registry = LayoutRegistry()
    dummy = registry.create('Dummy', [
        FieldDescriptor('a', FieldType.UINT32),
        FieldDescriptor('b', FieldType.UINT32),
    ])

    with pytest.raises(UnpackException):
        dummy.from_buffer(b'\x00' * 7)

    with pytest.raises(UnpackException):
        dummy.from_buffer(b'\x00' * 8, start=1)


def test_to_buffer_in_place():
    registry = LayoutRegistry()
    dummy = registry.create('Dummy', [
        FieldDescriptor('a', FieldType.UINT16),
        FieldDescriptor('b', FieldType.UINT16, default=0xffff),
    ])

    buffer = bytearray(8)
    result = dummy.to_buffer({'a': 0x0102}, buffer, 4)

    assert result is buffer
    assert buffer == b'\x00\x00\x00\x00\x02\x01\xff\xff'

    with pytest.raises(PackException):
        dummy.to_buffer({}, bytearray(8), 6)


def test_pack_error_has_chain():
    registry = LayoutRegistry()
    dummy = registry.create('Dummy', [
        FieldDescriptor('a', FieldType.UINT16),
        FieldDescriptor('x', FieldType.UINT16),
    ])

    with pytest.raises(PackException) as e:
        dummy.to_buffer({'x': 0x10000})

    assert e.value.chain == ['x']


def test_registry_is_idempotent():
    registry = LayoutRegistry()
    first = registry.create('Dummy', [
        FieldDescriptor('a', FieldType.UINT32),
    ])
    second = registry.create('Dummy', [
        FieldDescriptor('b', FieldType.UINT64),
    ])

    assert first is second
    assert second.get_ordered_fields_name() == ['a']
    assert len(registry) == 1
    assert 'Dummy' in registry
    assert registry.get('Dummy') is first


def test_registries_are_independent():
    registry_a = LayoutRegistry()
    registry_b = LayoutRegistry()

    registry_a.create('Dummy', [FieldDescriptor('a', FieldType.UINT32)])

    assert 'Dummy' not in registry_b

    with pytest.raises(LayoutNotFoundException):
        registry_b.get('Dummy')


def test_reference():
    registry = LayoutRegistry()
    registry.create('Point', [
        FieldDescriptor('x', FieldType.INT32),
        FieldDescriptor('y', FieldType.INT32),
    ])
    segment = registry.create('Segment', [
        FieldDescriptor('start', FieldType.REFERENCE, layout='Point'),
        FieldDescriptor('end', FieldType.REFERENCE, layout='Point'),
    ])

    assert segment.size == 16
    assert segment.layout == {
        'start': (0, 8),
        'end': (8, 8),
    }

    raw = segment.to_buffer({'start': {'x': 1, 'y': -1}})

    assert raw == b'\x01\x00\x00\x00\xff\xff\xff\xff' + b'\x00' * 8
    assert segment.from_buffer(raw) == {
        'start': {'x': 1, 'y': -1},
        'end': {'x': 0, 'y': 0},
    }


def test_reference_must_exist():
    registry = LayoutRegistry()

    with pytest.raises(LayoutNotFoundException):
        registry.create('Broken', [
            {'name': 'p', 'type': 'reference', 'layout': 'Missing'},
        ])

    assert 'Broken' not in registry


def test_unsupported_type():
    registry = LayoutRegistry()

    with pytest.raises(UnsupportedFieldTypeException) as e:
        registry.create('Broken', [
            {'name': 'c', 'type': 'char', 'size': 1},
        ])

    assert e.value.chain == ['c']
    assert 'Broken' not in registry


def test_duplicated_field():
    registry = LayoutRegistry()

    with pytest.raises(ValueError):
        registry.create('Dummy', [
            FieldDescriptor('a', FieldType.UINT32),
            FieldDescriptor('a', FieldType.UINT16),
        ])


def test_nested_unpack_error_has_chain():
    registry = LayoutRegistry()
    registry.create('Inner', [
        FieldDescriptor('name', FieldType.UTF8, size=4),
    ])
    outer = registry.create('Outer', [
        FieldDescriptor('inner', FieldType.REFERENCE, layout='Inner'),
    ])

    with pytest.raises(LayoutUnpackException) as e:
        outer.from_buffer(b'\xff\xff\xff\xff')

    assert e.value.chain == ['inner', 'name']
    assert str(e.value).startswith('inner.name: ')


def test_memory_address_in_layout():
    registry = LayoutRegistry()
    descriptor = registry.create('Descriptor', [
        FieldDescriptor('base', FieldType.MEMORY_ADDRESS),
        FieldDescriptor('size', FieldType.UINT32),
    ])

    raw = descriptor.to_buffer({'base': {'start': 0x400000}, 'size': 0x100})

    assert descriptor.from_buffer(raw) == {'base': 0x400000, 'size': 0x100}
