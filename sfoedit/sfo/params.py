'''
Type resolution and validation of the values of the entries.

The param format alone is not enough to know the type of the entries
with format ParamFormat.SPECIAL: some well-known keys are integers, all
the others are treated as raw bytes.
'''
import logging
import math
from typing import Optional

from ..enum import FieldType
from ..exceptions import ValidationException
from .enum import ParamFormat


logger = logging.getLogger(__name__)


PARAM_TYPES = {
    'ACCOUNT_ID':      FieldType.UINT64,
    'SAVEDATA_BLOCKS': FieldType.UINT64,
}

UINT32_MAX = 0xFFFFFFFF
UINT64_MAX = (1 << 64) - 1
BYTE_MAX   = 0xFF

# the bytes of a string value that are not valid UTF-8 survive a load/export
STRING_ERRORS = 'surrogateescape'


def get_entry_type(key: str, param_format: int) -> Optional[FieldType]:
    '''Return the type of the value, None if the format is unknown.'''
    if param_format == ParamFormat.SPECIAL:
        return PARAM_TYPES.get(key, FieldType.RAW)
    elif param_format == ParamFormat.UTF8:
        return FieldType.UTF8
    elif param_format == ParamFormat.UINT32:
        return FieldType.UINT32

    return None


def encoded_length(key, value) -> int:
    try:
        return len(value.encode('utf-8', STRING_ERRORS))
    except UnicodeEncodeError as e:
        raise ValidationException(key, f'value is not encodable as utf-8: {e}')


def _as_integer(key, value, message):
    if isinstance(value, bool):
        raise ValidationException(key, message)

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationException(key, message)
        value = int(value)

    if not isinstance(value, int):
        raise ValidationException(key, message)

    return value


def validate_uint32(key, value, index_entry):
    value = _as_integer(key, value, 'value must be a number!')

    if value < 0 or UINT32_MAX < value:
        raise ValidationException(key, f'value must be at least 0 and at most {UINT32_MAX}!')

    return value


def validate_utf8(key, value, index_entry):
    if not isinstance(value, str):
        raise ValidationException(key, 'value must be a string!')

    # one byte is for the terminator
    max_length = index_entry['param_max_length'] - 1
    if encoded_length(key, value) > max_length:
        raise ValidationException(key, f'string length must be at most {max_length}')

    return value


def validate_uint64(key, value, index_entry):
    if isinstance(value, str):
        try:
            value = int(value, 0)
        except ValueError:
            raise ValidationException(key, f'{value!r} is not an integer!')

    value = _as_integer(key, value, 'value must be an integer!')

    if value < 0 or UINT64_MAX < value:
        raise ValidationException(key, f'value must be at least 0 and at most {UINT64_MAX}!')

    return value


def validate_raw(key, value, index_entry):
    if isinstance(value, (bytes, bytearray)):
        value = list(value)

    if not isinstance(value, (list, tuple)):
        raise ValidationException(key, 'value must be an array!')

    length = index_entry['param_max_length']
    if len(value) != length:
        raise ValidationException(key, f'value must have {length} elements!')

    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= BYTE_MAX:
            raise ValidationException(
                key, f'all elements must be a number that is at least 0 and at most {BYTE_MAX}!')

    return bytes(value)


type2validator = {
    FieldType.UINT32: validate_uint32,
    FieldType.UTF8:   validate_utf8,
    FieldType.UINT64: validate_uint64,
    FieldType.RAW:    validate_raw,
}


def validate(key: str, value, index_entry: dict):
    '''Check the value is acceptable for the entry described by index_entry.

    It returns the type of the entry and the value normalized to the
    representation used when unpacking (int for integers, bytes for raw).'''
    param_format = index_entry['param_format']
    entry_type = get_entry_type(key, param_format)

    if entry_type is None:
        raise ValidationException(key, f'entries with param format 0x{param_format:04x} can\'t be edited')

    logger.debug('validating %r for \'%s\' as %s', value, key, entry_type)

    return entry_type, type2validator[entry_type](key, value, index_entry)
