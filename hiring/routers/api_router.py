from fastapi import APIRouter
from hiring.routers import (
    auth, job_postings, candidates, resume_profiles,
    super_admin_prompts, super_admin_plans, public
)

# Centralized API router hub; main.py only imports this one.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(job_postings.router)
api_router.include_router(candidates.router)
api_router.include_router(resume_profiles.router)
api_router.include_router(super_admin_prompts.router)
api_router.include_router(super_admin_plans.router)
api_router.include_router(public.router)
