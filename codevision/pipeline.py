import logging
import time
from typing import Callable, Optional

from .config import ProviderConfig, Settings
from .normalizer import normalize
from .prompts import build_prompt
from .providers import client_for
from .schemas import NormalizedResult, OperationRequest

logger = logging.getLogger(__name__)


class OperationPipeline:
    """
    Runs one operation end to end:
    credential check -> prompt -> single provider call -> normalization.

    Holds only the startup settings; nothing is shared between requests.
    """

    def __init__(self, settings: Settings, client_factory: Optional[Callable[[ProviderConfig], object]] = None):
        self.settings = settings
        self.client_factory = client_factory or client_for

    async def run(self, operation: OperationRequest) -> NormalizedResult:
        kind = operation.kind
        config = self.settings.require(kind)
        prompt = build_prompt(operation)
        client = self.client_factory(config)

        start_time = time.time()
        reply = await client.complete(prompt, config)
        elapsed_ms = int((time.time() - start_time) * 1000)

        if not reply.ok:
            logger.warning("%s via %s failed (%s) after %dms", kind.value, config.provider, reply.error_kind, elapsed_ms)
        else:
            logger.info("%s via %s answered in %dms", kind.value, config.provider, elapsed_ms)

        return normalize(kind, reply.unwrap())
