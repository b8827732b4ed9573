#!/usr/bin/env python3
'''
Edit the values of a SFO file using a JSON file as configuration.

 $ editsfo.py PARAM.SFO edits.json PARAM.SFO.new
'''
import sys
import os
import logging

from sfoedit.sfo import SfoDocument
from sfoedit.config import load_config, apply_config
from sfoedit.streams import Stream
from sfoedit.exceptions import SFOEditException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} <sfo file> <config file> <output path>')
    sys.exit(1)


if __name__ == '__main__':
    if len(sys.argv) < 4:
        usage(sys.argv[0])

    path_sfo, path_config, path_output = sys.argv[1:4]

    document = SfoDocument()

    try:
        document.load(path_sfo)
        apply_config(document, load_config(path_config))
        data = document.export()
    except (SFOEditException, OSError) as e:
        logger.error(f'failed to edit \'{path_sfo}\': {e}')
        sys.exit(2)

    Stream.save(path_output, data)
