from typing import Any, Dict, Optional

from app.features.lighthouse.models.job import Job
from app.features.lighthouse.services.browser_service import BrowserService
from app.features.lighthouse.services.collector import CollectorClient
from app.features.lighthouse.services.engine import LighthouseEngine
from app.features.lighthouse.services.summary import summarize_report
from app.platform.exceptions import DeliveryError, EngineError
from app.platform.logger import get_logger

logger = get_logger("job_runner")


class JobRunner:
    """
    Runs one audit job end to end: browser, Lighthouse, summary, delivery.

    Nothing here is returned to a caller. Outcomes are visible only through
    the job's status, the logs, and what reaches the collector.
    """

    def __init__(
        self,
        browser: Optional[BrowserService] = None,
        engine: Optional[LighthouseEngine] = None,
        collector: Optional[CollectorClient] = None,
    ):
        self.browser = browser or BrowserService()
        self.engine = engine or LighthouseEngine()
        self.collector = collector or CollectorClient()

    async def run_audit(self, job: Job) -> Dict[str, Any]:
        async with self.browser.session() as session:
            return await self.engine.run_audit(job.url, job.options, session.port)

    async def execute(self, job: Job) -> None:
        job.start()
        logger.info(f"Running Lighthouse for {job.url} (ID: {job.id})")

        try:
            report = await self.run_audit(job)
        except EngineError as e:
            logger.error(f"Lighthouse error for {job.id}: {e}")
            job.fail(str(e))
            return
        except Exception as e:
            logger.error(f"Unexpected error while auditing {job.id}: {e}", exc_info=True)
            job.fail(str(e) or e.__class__.__name__)
            return

        logger.info(f"Lighthouse test finished for {job.id}")
        self.log_summary(job, report)
        await self.deliver(job, report)

    def log_summary(self, job: Job, report: Dict[str, Any]) -> None:
        summary = summarize_report(report, job.url)
        logger.info(f"Lighthouse results for {job.id}:")
        for line in summary.lines():
            logger.info(line)

    async def deliver(self, job: Job, report: Dict[str, Any]) -> None:
        try:
            await self.collector.send(job.id, report)
        except DeliveryError as e:
            logger.error(f"Failed to send results for {job.id} to the API: {e}")
            job.fail(str(e))
            return
        except Exception as e:
            logger.error(f"Unexpected error while sending results for {job.id}: {e}", exc_info=True)
            job.fail(str(e) or e.__class__.__name__)
            return

        job.complete()
        logger.info(f"Results for {job.id} sent to the API")
