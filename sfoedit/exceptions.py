class SFOEditException(Exception):
    '''Base class to extend in order to throw exception in sfoedit.

    It takes as argument the chain of the layer that caused the exception
    (outermost first) and an optional human readable message.
    '''

    def __init__(self, chain=None, message=None):
        self.chain = chain if chain is not None else []
        self.message = message
        super().__init__(message)

    def __str__(self):
        location = '.'.join(self.chain)
        if location and self.message:
            return f'{location}: {self.message}'

        return location or self.message or ''


class UnpackException(SFOEditException):
    pass


class LayoutUnpackException(UnpackException):
    '''A field of a layout failed to unpack, the chain tells which one.'''
    pass


class MagicException(SFOEditException):
    pass


class PackException(SFOEditException):
    pass


class LayoutNotFoundException(SFOEditException):

    def __init__(self, name):
        self.name = name
        super().__init__(message=f'layout \'{name}\' does not exist')


class UnsupportedFieldTypeException(SFOEditException):

    def __init__(self, field_type, chain=None):
        self.field_type = field_type
        super().__init__(chain=chain, message=f'don\'t know how to handle field type {field_type!r}')


class EntryNotFoundException(SFOEditException, KeyError):

    def __init__(self, key):
        self.key = key
        super().__init__(message=f'no entry for {key}')


class ValidationException(SFOEditException):
    '''The value for an entry doesn't respect the constraints of its type.'''

    def __init__(self, key, message):
        self.key = key
        super().__init__(chain=[key], message=message)


class ConfigException(SFOEditException):
    pass
