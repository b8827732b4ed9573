'''
The edits to apply to a document are described by a JSON object like

    {
        "TITLE": "My game",
        "SAVEDATA_BLOCKS": 1024,
        "PARAMS": [0, 1, 2, 3]
    }

where each key must already exist into the SFO file.
'''
import json
import logging

from .exceptions import ConfigException


logger = logging.getLogger(__name__)


def parse_config(text: str) -> dict:
    try:
        config = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigException(message=f'invalid JSON: {e}')

    if not isinstance(config, dict):
        raise ConfigException(message=f'the configuration must be an object, not {config.__class__.__name__}')

    return config


def load_config(path) -> dict:
    logger.debug('loading configuration from \'%s\'' % path)
    with open(path, 'r', encoding='utf-8') as f:
        return parse_config(f.read())


def apply_config(document, config: dict):
    '''Edit the document with each value of the configuration, in order.
    The first failure stops the process.'''
    for key, value in config.items():
        logger.debug('setting \'%s\' to %r' % (key, value))
        document.edit_entry(key, value)
