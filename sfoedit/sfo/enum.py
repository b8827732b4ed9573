from enum import IntEnum


class ParamFormat(IntEnum):
    '''How the data of an entry must be interpreted'''
    SPECIAL = 0x0004  # integer or raw bytes depending on the key
    UTF8    = 0x0204  # null terminated
    UINT32  = 0x0404
