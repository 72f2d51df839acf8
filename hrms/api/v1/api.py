"""
API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from hrms.api.v1.endpoints import (accounting, activities, attendance, auth,
                                   dashboard, employees, health, leaves,
                                   payroll, performance, recruitment, reports,
                                   settings)

api_router = APIRouter()

# Auth (login, registration, password reset)
api_router.include_router(auth.router)

# People
api_router.include_router(employees.router)
api_router.include_router(attendance.router)
api_router.include_router(leaves.router)

# Compensation & evaluation
api_router.include_router(payroll.router)
api_router.include_router(performance.router)

# Back office
api_router.include_router(recruitment.router)
api_router.include_router(accounting.router)
api_router.include_router(settings.router)

# Read models
api_router.include_router(dashboard.router)
api_router.include_router(reports.router)
api_router.include_router(activities.router)
api_router.include_router(health.router)
