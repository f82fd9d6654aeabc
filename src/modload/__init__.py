"""
Module resolution and loading for an embeddable scripting runtime.

Turns the specifier strings that running code imports into exactly one
concrete module each, initializes every module at most once and hands the
importer a namespace for it.
"""

__version__ = "0.1.0"


from ._error import *
from ._config import *
from ._source import *
from ._record import *
from ._stack import *
from ._search import *
from ._manifest import *
from ._datauri import *
from ._parse import *
from ._eval import *
from ._hooks import *
from ._builtin import *
from ._normalize import *
from ._loader import *
from . import stdlib
