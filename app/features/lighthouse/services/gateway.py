from typing import Any

from app.features.lighthouse.models.job import Job
from app.features.lighthouse.schemas.lighthouse import AnalyzeIn, AnalyzeOut
from app.features.lighthouse.services.dispatcher import JobDispatcher
from app.platform.exceptions import ValidationError
from app.platform.logger import get_logger
from app.platform.utils.url_validator import is_absolute_url

logger = get_logger("analysis_gateway")


class AnalysisGateway:
    def __init__(self, dispatcher: JobDispatcher):
        self.dispatcher = dispatcher

    @staticmethod
    def validate(payload: Any) -> AnalyzeIn:
        """Check ``url`` presence first, then syntax. Anything that is not a JSON object has no url."""
        body = payload if isinstance(payload, dict) else {}
        url = body.get("url")

        if url is None or (isinstance(url, (str, bool, int, float)) and not url):
            raise ValidationError("URL required")
        if not isinstance(url, str) or not is_absolute_url(url):
            raise ValidationError("URL invalid")

        options = body.get("options")
        if options is not None and not isinstance(options, dict):
            logger.warning(f"Ignoring non-object options for {url}: {type(options).__name__}")
            options = None

        return AnalyzeIn(url=url.strip(), options=options or {})

    def accept(self, payload: Any) -> AnalyzeOut:
        request = self.validate(payload)
        job = Job(url=request.url, options=request.options)

        logger.info(f"Starting Lighthouse test for: {job.url} (ID: {job.id})")
        self.dispatcher.submit(job)

        return AnalyzeOut(id=job.id)
