from enum import Enum, Flag


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE         = 0
    MAGIC        = 1 << 0
    PARAM_FORMAT = 1 << 1


class FieldType(Enum):
    '''The closed set of types a field of a layout can have.

    The value is the tag used when a descriptor is written as a plain mapping.'''
    RAW            = 'raw'
    ASCII          = 'ascii'
    UTF8           = 'utf8'
    UINT16         = 'uint16'
    UINT32         = 'uint32'
    UINT64         = 'uint64'
    INT16          = 'int16'
    INT32          = 'int32'
    INT64          = 'int64'
    MEMORY_ADDRESS = 'memoryAddress'  # same wire format as uint64
    REFERENCE      = 'reference'
