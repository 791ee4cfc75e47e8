from pydantic import BaseModel

class Category(BaseModel):
    """A language tutors can be browsed by"""
    title: str
    path: str
    icon: str

class DashboardStatsResponse(BaseModel):
    """Dashboard counters"""
    totalTutors: int
    totalBookings: int
    totalUsers: int
    pendingReviews: int
