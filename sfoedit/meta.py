import copy
import logging
from collections.abc import Mapping

from . import fields
from .enum import FieldType
from .exceptions import UnsupportedFieldTypeException


class FieldDescriptor(object):
    """Declaration of a field inside a layout.

    The same descriptor can be used in more than one layout: registering
    it creates a copy bound to the Field that does the actual work."""

    def __init__(self, name: str, type, size: int = None, offset: int = None, default=None, layout: str = None):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.name = name
        self.type = self.get_type(type, name)
        self._size = size
        self.offset = offset
        self._default = default
        self.layout = layout
        self.field = None

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name}, {self.type.value}, size={self.size}, offset={self.offset})>'

    @staticmethod
    def get_type(value, name=None):
        try:
            return FieldType(value)
        except ValueError:
            raise UnsupportedFieldTypeException(value, chain=[name] if name else None)

    @classmethod
    def from_requirement(cls, requirement):
        """Accept either a FieldDescriptor or a mapping with the same keys."""
        if isinstance(requirement, FieldDescriptor):
            return requirement

        if not isinstance(requirement, Mapping):
            raise ValueError(f'{requirement!r} is not a valid field description')

        return cls(**requirement)

    @property
    def size(self) -> int:
        if self.field is not None:
            return self.field.size

        return self._size or 0

    @property
    def default(self):
        if self.field is not None:
            return self.field.value_from_default()

        return self._default

    def create(self, reference=None) -> "FieldDescriptor":
        """Return a copy bound to the field for its type, "reference" is the
        already resolved layout when the type is FieldType.REFERENCE."""
        instance = copy.copy(self)
        self.logger.debug("create field for '%s' of type %s", self.name, self.type)
        instance.field = fields.field_for(self.type, size=self._size, default=self._default, layout=reference)

        return instance
