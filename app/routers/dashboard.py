"""
Dashboard router providing aggregate counters over the stored records.
"""
from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError
import asyncio
from app.database.database import RecordStore, get_store, TUTORS, BOOKINGS, USERS
from app.schemas.dashboard_schema import DashboardStatsResponse
from app.utilities import storage_failure
from app.logger import logger

router = APIRouter(prefix='/dashboard')

@router.get('/stats', response_model=DashboardStatsResponse)
async def dashboard_stats(store: RecordStore = Depends(get_store)):
    """
    Fetch dashboard data: tutor, booking and user counts, and how many
    bookings are still waiting for a review.

    The four counts run concurrently and are not taken from one snapshot,
    so they may disagree slightly while writes are in flight.

    Returns:
        DashboardStatsResponse: Dashboard statistics
    """
    # Let every count finish so none of their errors go unretrieved
    results = await asyncio.gather(
        store.count(TUTORS),
        store.count(BOOKINGS),
        store.count(USERS),
        store.count(BOOKINGS, {"reviewed": False}),
        return_exceptions=True,
    )
    failures = [result for result in results if isinstance(result, BaseException)]
    for failure in failures[1:]:
        logger.error(f"Dashboard stats error: {str(failure)}")
    if failures:
        if isinstance(failures[0], PyMongoError):
            raise storage_failure("Dashboard stats", failures[0], "Failed to fetch dashboard stats")
        raise failures[0]
    total_tutors, total_bookings, total_users, pending_reviews = results

    return {
        "totalTutors": total_tutors,
        "totalBookings": total_bookings,
        "totalUsers": total_users,
        "pendingReviews": pending_reviews,
    }
