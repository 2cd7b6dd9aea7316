"""Stages layered on QueryMapProjection output."""
from typing import Iterable

from urlbits.domain.models import QueryMap
from urlbits.processing.stages.base import BaseStage


class KeysProjection(BaseStage):
    """Each distinct key of each map; the same key in another map is emitted again."""

    name = "keys"

    def process(self, query_map: QueryMap) -> Iterable[str]:
        return query_map.keys()


class ValuesProjection(BaseStage):
    """Every value of every key, flattened, repeated values included."""

    name = "values"

    def process(self, query_map: QueryMap) -> Iterable[str]:
        return query_map.values()
