from pydantic import BaseModel


class MonthlyJobCount(BaseModel):
    month: str          # "2025-04"
    imports: int
    exports: int
    total: int


class DashboardStats(BaseModel):
    total_jobs: int
    active_jobs: int
    pending_jobs: int
    completed_jobs: int
    cancelled_jobs: int
    relationship_managers: int
    shippers: int
    consignees: int
    overseas_agents: int
    monthly_trend: list[MonthlyJobCount]
