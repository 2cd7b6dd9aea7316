from urlbits.processing.stages.base import BaseStage, FilterStage
from urlbits.processing.stages.parse import ParserStage
from urlbits.processing.stages.project import (
    HostProjection,
    PathProjection,
    QueryMapProjection,
    RecordProjection,
    UserProjection,
)
from urlbits.processing.stages.query import KeysProjection, ValuesProjection
from urlbits.processing.stages.validate import ValidatorStage

__all__ = [
    "BaseStage",
    "FilterStage",
    "HostProjection",
    "KeysProjection",
    "ParserStage",
    "PathProjection",
    "QueryMapProjection",
    "RecordProjection",
    "UserProjection",
    "ValidatorStage",
    "ValuesProjection",
]
