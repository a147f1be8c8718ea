"""Command line entry point for scoring a folder of resumes.

Usage:
    # Against Bedrock and DynamoDB
    resume-scorer --jd-file jd.pdf resumes/*.pdf

    # Offline demo with a keyword scorer (no AWS required)
    resume-scorer --demo --jd-text "Data Engineer\n- Python\n- SQL" resumes/*.txt
"""

import argparse
import asyncio
import logging
import re
import sys
from typing import List, Optional

from .config import ScoringConfig
from .encoder import decode_content
from .errors import ResumeScorerError
from .intake import Batch, handle_from_path, intake_paths
from .models import ItemStatus, JobDescription, ScorePayload
from .oracle import BedrockOracle
from .orchestrator import ScoringOrchestrator
from .projection import batch_progress, project_results
from .resolver import ExistingJob, ExtractFromDocument, JobResolver, ManualText
from .store import DynamoDBStore, InMemoryStore

logger = logging.getLogger(__name__)

WORD = re.compile(r"[a-z][a-z0-9+#.]{2,}")


class KeywordOracle:
    """Deterministic stand-in oracle for demo runs.

    Scores a resume by the share of job description keywords found in its text.
    """

    async def score_resume(
        self, job_description: str, name: str, content: str, media_type: str
    ) -> ScorePayload:
        text = decode_content(content).decode("utf-8", errors="ignore") if content else ""
        wanted = set(WORD.findall(job_description.lower()))
        found = wanted & set(WORD.findall(text.lower()))
        score = round(len(found) * 100 / len(wanted)) if wanted else 0
        first_line = text.strip().split("\n")[0].strip() if text.strip() else ""
        return ScorePayload(
            candidateName=first_line[:60] or None,
            currentRole=None,
            matchScore=score,
            analysis=f"Matched {len(found)} of {len(wanted)} job description keywords.",
        )

    async def extract_job_description(self, name: str, content: str, media_type: str) -> str:
        return decode_content(content).decode("utf-8", errors="ignore").strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score resumes against a job description")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--job-id", help="ID of a stored job to score against")
    source.add_argument("--jd-text", help="Job description text")
    source.add_argument("--jd-file", help="Job description document to extract text from")
    parser.add_argument("--demo", action="store_true", help="Use the offline keyword scorer and in-memory store")
    parser.add_argument("--order", choices=["submission", "score"], default="submission")
    parser.add_argument("resumes", nargs="+", help="Resume files to score")
    return parser


def print_results(batch: Batch, order: str) -> None:
    rows = project_results(batch, order=order)
    print(f"{'Rank':<6}{'Candidate':<32}{'Score':>7}  Summary")
    for row in rows:
        rank = f"#{row.rank}" if row.rank else "FAILED"
        score = f"{row.match_score}%" if not row.failed else "-"
        print(f"{rank:<6}{row.candidate_name[:30]:<32}{score:>7}  {row.analysis}")
    progress = batch_progress(batch)
    print(f"\n{progress.completed} completed, {progress.failed} failed of {progress.total}")


async def run(args: argparse.Namespace, config: ScoringConfig) -> Batch:
    if args.demo:
        store, oracle = InMemoryStore(), KeywordOracle()
    else:
        store, oracle = DynamoDBStore(config), BedrockOracle(config)
    resolver = JobResolver(store, oracle, config)
    orchestrator = ScoringOrchestrator(oracle, store, resolver, config)

    if args.job_id:
        selection = ExistingJob(args.job_id)
    elif args.jd_file:
        selection = ExtractFromDocument(handle_from_path(args.jd_file))
    else:
        selection = ManualText(args.jd_text.replace("\\n", "\n"))
    job: JobDescription = await resolver.resolve(selection)
    if not job.is_ready:
        raise ResumeScorerError("Job description is empty")

    batch = Batch(intake_paths(args.resumes))
    batch.subscribe(
        lambda b: logger.debug(f"Progress: {batch_progress(b).percent}%")
    )
    await orchestrator.run_batch(batch, job)
    return batch


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    args = build_parser().parse_args(argv)
    try:
        batch = asyncio.run(run(args, ScoringConfig.from_env()))
    except ResumeScorerError as e:
        logger.error(f"Could not start scoring: {e}")
        return 2
    print_results(batch, args.order)
    if all(item.status is ItemStatus.FAILED for item in batch):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
