import struct

import pytest


SFO_MAGIC = b'\x00PSF'
SFO_VERSION = b'\x01\x01\x00\x00'


def build_sfo(entries, magic=SFO_MAGIC, version=SFO_VERSION, entry_count=None):
    '''Build a SFO file with the tables in the same order as "entries", a list of

        (key, param_format, param_length, param_max_length, data)
    '''
    index = b''
    key_table = b''
    data_table = b''
    for key, param_format, param_length, param_max_length, data in entries:
        index += struct.pack('<HHIII', len(key_table), param_format, param_length, param_max_length, len(data_table))
        key_table += key.encode('utf-8') + b'\x00'
        data_table += data.ljust(param_max_length, b'\x00')

    key_table += b'\x00' * (-len(key_table) % 4)

    key_table_offset = 0x14 + 0x10 * len(entries)
    data_table_offset = key_table_offset + len(key_table)
    entry_count = len(entries) if entry_count is None else entry_count

    header = magic + version + struct.pack('<iii', key_table_offset, data_table_offset, entry_count)

    return header + index + key_table + data_table


SAMPLE_ENTRIES = [
    ('TITLE_ID',        0x0404, 4, 4,  struct.pack('<I', 7)),
    ('TITLE',           0x0204, 6, 16, b'kebab\x00'),
    ('SAVEDATA_BLOCKS', 0x0004, 8, 8,  struct.pack('<Q', 1 << 63)),
    ('PARAMS',          0x0004, 4, 4,  b'\x01\x02\x03\x04'),
    ('ACCOUNT_ID',      0x0004, 8, 8,  struct.pack('<Q', 0x1122334455667788)),
]

SAMPLE_VALUES = {
    'TITLE_ID': 7,
    'TITLE': 'kebab',
    'SAVEDATA_BLOCKS': 1 << 63,
    'PARAMS': b'\x01\x02\x03\x04',
    'ACCOUNT_ID': 0x1122334455667788,
}


@pytest.fixture
def sfo_builder():
    return build_sfo


@pytest.fixture
def sample_sfo():
    return build_sfo(SAMPLE_ENTRIES)


@pytest.fixture
def sample_values():
    return dict(SAMPLE_VALUES)
