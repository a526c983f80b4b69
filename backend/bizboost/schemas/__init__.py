# bizboost/schemas/__init__.py
"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .auth import *
from .business import *
from .review import *
from .deal import *
from .bookmark import *
