"""API V1 Router"""

from fastapi import APIRouter

from academy.api.v1.endpoints import (
    auth, invoices, trial_requests, enrollment, students, classes
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices & Payments"])
api_router.include_router(trial_requests.router, prefix="/trial-requests", tags=["Trial Requests"])
api_router.include_router(enrollment.router, prefix="/enrollment", tags=["Enrollment"])
api_router.include_router(students.router, prefix="/students", tags=["Student Management"])
api_router.include_router(classes.router, prefix="/classes", tags=["Classes"])
