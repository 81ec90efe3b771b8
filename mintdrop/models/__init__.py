"""
Types here are instantiated as subclasses of pydantic's `BaseModel`.
This means we get runtime deserialization and validation for free just by using type declarations
and a couple of pydantic helpers.

Use these in your code as python objects, then serialize to json with `.model_dump_json()`
"""

from mintdrop.models.types import *
from mintdrop.models.Claim import *
from mintdrop.models.Config import *
from mintdrop.models.Distributor import *
from mintdrop.models.Result import *
