#!/usr/bin/env python3
import sys
import os
import logging

from sfoedit.sfo import SfoDocument
from sfoedit.exceptions import SFOEditException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print('usage: %s <sfo file>' % progname)
    sys.exit(1)


def dump_header(hdr):
    print(f'''SFO Header:
  Magic:             {hdr["magic"].hex()}
  Version:           {hdr["version"].hex()}
  Key table offset:  0x{hdr["key_table_offset"]:x}
  Data table offset: 0x{hdr["data_table_offset"]:x}
  Entries:           {hdr["entry_count"]}''')


def dump_entries(document):
    print(f''' {"Key":<24} Format Length  MaxLen  Value''')
    for key in document.keys():
        index = document.get_index(key)
        print(f''' {key:<24} 0x{index["param_format"]:04x} {index["param_length"]:<7d} {index["param_max_length"]:<7d} {document[key]!r}''')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    path = sys.argv[1]

    document = SfoDocument()

    try:
        document.load(path)
    except (SFOEditException, OSError) as e:
        logger.error(f'failed to read \'{path}\': {e}')
        sys.exit(2)

    dump_header(document.header)
    dump_entries(document)
