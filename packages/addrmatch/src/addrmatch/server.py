"""FastAPI server exposing address matching to the job import and review screens."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from addrmatch.config import MatchConfig, MatchOptions
from addrmatch.customers import CustomerMatcher
from addrmatch.jobs import find_all_matches, match_address_to_job
from addrmatch.manual_matches import ManualLinkStore
from addrmatch.normalize import normalize_address
from addrmatch.scoring import calculate_similarity, confidence_for
from addrmatch.sources import (
    CandidateSource,
    CandidateSourceError,
    StaticCandidateSource,
    customer_source,
    job_source,
    read_table,
)

log = structlog.get_logger()


class MatchAddressRequest(BaseModel):
    """Request body for job matching."""

    address: str | None = None
    find_all: bool = False
    min_score: float | None = None
    include_archived: bool = False


class CustomerMatchRequest(BaseModel):
    """Request body for customer matching."""

    address: str | None = None
    find_all: bool = False
    min_score: float | None = None


class CreateLinkRequest(BaseModel):
    """Request body for creating a manual link."""

    entity: Literal["job", "customer"]
    address: str
    candidate_id: str
    notes: str = ""


class LinkResponse(BaseModel):
    """Response for a manual link."""

    entity: str
    address: str
    candidate_id: str
    created_at: str
    notes: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_address(address: str | None) -> str:
    if not address or not address.strip():
        raise HTTPException(
            status_code=400,
            detail='Request body must include a non-empty "address" string',
        )
    return address


def create_app(
    jobs_path: str | Path,
    customers_path: str | Path | None = None,
    links_path: str | Path | None = None,
    config: MatchConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(title="addrmatch")
    config = config or MatchConfig()

    # Load data at startup
    log.info("server_loading_data", jobs=str(jobs_path), customers=str(customers_path))
    jobs_df = read_table(jobs_path)
    customers: CandidateSource = StaticCandidateSource([], name="customers")
    if customers_path is not None:
        try:
            customers = customer_source(read_table(customers_path))
        except (OSError, ValueError) as exc:
            # Customer matching degrades to "no match"; job routes keep working
            log.error("customer_load_failed", path=str(customers_path), error=str(exc))
    log.info("server_data_loaded", job_rows=len(jobs_df))

    links: ManualLinkStore | None = None
    if links_path is not None:
        links = ManualLinkStore(Path(links_path))
        links.load()

    customer_matcher = CustomerMatcher(customers, config, manual_links=links)

    @app.post("/api/match-address")
    async def match_address(req: MatchAddressRequest) -> dict[str, Any]:
        """Match an imported submission address to active jobs."""
        address = _require_address(req.address)
        try:
            jobs = job_source(jobs_df, include_archived=req.include_archived).fetch()
        except CandidateSourceError as exc:
            log.error("job_fetch_failed", error=exc.detail)
            raise HTTPException(status_code=500, detail=f"Failed to fetch jobs: {exc.detail}")

        query = {"address": address, "normalized": normalize_address(address)}
        if not jobs:
            return {
                "success": True,
                "query": query,
                "match": None,
                "matches": [],
                "total_jobs": 0,
                "message": "No jobs found",
                "timestamp": _now(),
            }

        options = MatchOptions(min_score=req.min_score)
        if req.find_all:
            matches = find_all_matches(address, jobs, options, config)
            return {
                "success": True,
                "query": query,
                "matches": [m.to_dict("job") for m in matches],
                "total_matches": len(matches),
                "total_jobs": len(jobs),
                "timestamp": _now(),
            }

        match = match_address_to_job(address, jobs, options, config, manual_links=links)
        return {
            "success": True,
            "query": query,
            "match": match.to_dict("job") if match else None,
            "total_jobs": len(jobs),
            "timestamp": _now(),
        }

    @app.get("/api/match-address/test")
    async def compare_addresses(address1: str = "", address2: str = "") -> dict[str, Any]:
        """Show how two addresses normalize and score against each other."""
        if not address1 or not address2:
            raise HTTPException(
                status_code=400,
                detail="Both address1 and address2 query parameters are required",
            )
        normalized1 = normalize_address(address1)
        normalized2 = normalize_address(address2)
        similarity = calculate_similarity(normalized1, normalized2)
        return {
            "success": True,
            "comparison": {
                "address1": {"original": address1, "normalized": normalized1},
                "address2": {"original": address2, "normalized": normalized2},
                "similarity": similarity,
                "is_match": similarity >= config.jobs.best,
                "confidence": confidence_for(similarity, config.tiers),
            },
            "timestamp": _now(),
        }

    @app.post("/api/customers/match")
    async def match_customer(req: CustomerMatchRequest) -> dict[str, Any]:
        """Match a job address to customer records."""
        address = _require_address(req.address)
        options = MatchOptions(min_score=req.min_score)
        if req.find_all:
            matches = customer_matcher.find_all_customer_matches(address, options)
            return {
                "success": True,
                "matches": [m.to_dict("customer") for m in matches],
                "total_matches": len(matches),
                "timestamp": _now(),
            }
        match = customer_matcher.match_job_to_customer(address, options)
        return {
            "success": True,
            "match": match.to_dict("customer") if match else None,
            "timestamp": _now(),
        }

    def _store() -> ManualLinkStore:
        if links is None:
            raise HTTPException(status_code=400, detail="No manual links path configured")
        return links

    @app.get("/api/manual-links")
    async def get_links() -> list[LinkResponse]:
        """Get all manual links."""
        return [
            LinkResponse(
                entity=m.entity,
                address=m.address,
                candidate_id=m.candidate_id,
                created_at=m.created_at,
                notes=m.notes,
            )
            for m in _store().get_all()
        ]

    @app.post("/api/manual-links")
    async def create_link(req: CreateLinkRequest) -> LinkResponse:
        """Record a manual link chosen by a reviewer."""
        if not normalize_address(req.address):
            raise HTTPException(status_code=400, detail="address cannot be empty")
        if not req.candidate_id:
            raise HTTPException(status_code=400, detail="candidate_id cannot be empty")

        link = _store().add_link(
            entity=req.entity,
            address=req.address,
            candidate_id=req.candidate_id,
            notes=req.notes,
        )
        return LinkResponse(
            entity=link.entity,
            address=link.address,
            candidate_id=link.candidate_id,
            created_at=link.created_at,
            notes=link.notes,
        )

    @app.delete("/api/manual-links/{index}")
    async def delete_link(index: int) -> dict[str, bool]:
        """Delete a manual link by index."""
        if _store().remove_link(index):
            return {"success": True}
        raise HTTPException(status_code=404, detail="Link not found")

    return app
