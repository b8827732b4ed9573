import logging
import os


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around path/bytes objects to
    uniform them as a buffer that the layouts can read from.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as bytes'''
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            if not isinstance(obj, os.PathLike):
                raise ValueError('\'%s\' is the wrong kind of object to use' % obj.__class__.__name__)
            init_method = self.init_str

        init_method()

    def init_str(self):
        '''We think this is a path'''
        logger.debug('reading path \'%s\'' % self.obj)
        with open(self.obj, 'rb') as f:
            self.obj = f.read()

    def init_bytes(self):
        '''We think these are raw bytes'''
        pass

    def init_bytearray(self):
        self.obj = bytes(self.obj)

    def init_memoryview(self):
        self.obj = self.obj.tobytes()

    def read_all(self) -> bytes:
        return self.obj

    @staticmethod
    def save(path, data):
        logger.debug('writing %d bytes to \'%s\'' % (len(data), path))
        with open(path, 'wb') as f:
            f.write(data)
