"""Resume Scorer API - FastAPI + Mangum for Lambda."""

import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from .config import ScoringConfig
from .errors import BatchAlreadyRunning, ExtractionError, JobNotFound, PersistenceError
from .intake import Batch
from .models import SourceHandle
from .oracle import BedrockOracle
from .orchestrator import ScoringOrchestrator
from .projection import batch_progress, project_results
from .resolver import ExistingJob, JobResolver, ManualText, parse_sections
from .store import DynamoDBStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Resume Scorer API", version="1.0.0")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# Service singletons, built on first use
_config = None
_store = None
_oracle = None
_orchestrator = None


def get_config() -> ScoringConfig:
    global _config
    if _config is None:
        _config = ScoringConfig.from_env()
    return _config


def get_store():
    global _store
    if _store is None:
        _store = DynamoDBStore(get_config())
    return _store


def get_oracle():
    global _oracle
    if _oracle is None:
        _oracle = BedrockOracle(get_config())
    return _oracle


def get_resolver() -> JobResolver:
    return JobResolver(get_store(), get_oracle(), get_config())


def get_orchestrator() -> ScoringOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ScoringOrchestrator(get_oracle(), get_store(), get_resolver(), get_config())
    return _orchestrator


async def _to_handle(upload: UploadFile) -> SourceHandle:
    data = await upload.read()
    return SourceHandle(
        name=upload.filename or "upload",
        size=len(data),
        media_type=upload.content_type or "application/octet-stream",
        data=data,
    )


@app.get("/health")
def health(config: ScoringConfig = Depends(get_config)):
    return {"status": "healthy", "model_id": config.model_id, "region": config.region}


@app.get("/jobs")
def get_jobs(store=Depends(get_store)):
    try:
        jobs = store.find_jobs()
    except PersistenceError as e:
        raise HTTPException(503, str(e))
    return {"jobs": [job.to_dict() for job in jobs]}


@app.post("/jd/extract")
async def extract_job_description(
    file: UploadFile = File(...),
    resolver: JobResolver = Depends(get_resolver),
):
    handle = await _to_handle(file)
    try:
        text = await resolver.extract(handle)
    except ExtractionError as e:
        logger.error(f"JD extraction failed: {e}")
        raise HTTPException(422, "Failed to extract job description. Please paste it manually.")
    return {"description": text, "sections": [asdict(s) for s in parse_sections(text)]}


@app.post("/score")
async def score_resumes(
    files: List[UploadFile] = File(...),
    job_id: Optional[str] = Form(None),
    jd_text: Optional[str] = Form(None),
    order: str = Form("submission"),
    resolver: JobResolver = Depends(get_resolver),
    orchestrator: ScoringOrchestrator = Depends(get_orchestrator),
):
    if not files:
        raise HTTPException(400, "At least one resume file is required")
    if order not in ("submission", "score"):
        raise HTTPException(400, "order must be 'submission' or 'score'")
    if jd_text and jd_text.strip():
        selection = ManualText(jd_text)
    elif job_id:
        selection = ExistingJob(job_id)
    else:
        raise HTTPException(400, "Provide job_id or jd_text")

    try:
        job = await resolver.resolve(selection)
    except JobNotFound as e:
        raise HTTPException(404, str(e))
    except PersistenceError as e:
        raise HTTPException(503, str(e))
    if not job.is_ready:
        raise HTTPException(400, "Job description is empty")

    batch = Batch()
    batch.add_files([await _to_handle(f) for f in files])
    # run_batch checks for an active run before it saves a new job record
    try:
        await orchestrator.run_batch(batch, job)
    except BatchAlreadyRunning as e:
        raise HTTPException(409, str(e))
    except PersistenceError as e:
        raise HTTPException(503, str(e))

    progress = batch_progress(batch)
    return {
        "job_id": batch.job.origin_ref,
        "results": [asdict(row) for row in project_results(batch, order=order)],
        "progress": {**asdict(progress), "percent": progress.percent},
    }


# Mangum handler for Lambda
handler = Mangum(app, lifespan="off")
