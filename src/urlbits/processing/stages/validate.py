"""Stage dropping URIs that lack a scheme or a host."""
from urlbits.domain.models import ParsedURI
from urlbits.processing.shared.constants import DROP_REASONS, STAGE_VALIDATE
from urlbits.processing.stages.base import FilterStage


def _display(uri: ParsedURI) -> str:
    record = uri.to_record()
    return " ".join(f"{k}={v}" for k, v in record.items()) or "<empty>"


class ValidatorStage(FilterStage):
    """
    Quick validation: a record survives only if both scheme and host are set.

    Opaque URIs such as ``mailto:user@host`` never have a host and are dropped.
    """

    name = STAGE_VALIDATE

    def keep(self, uri: ParsedURI) -> bool:
        if uri.scheme and uri.host:
            return True
        self.drop(_display(uri), DROP_REASONS['NOT_VALID_URL'])
        return False
