from pydantic import BaseModel


class AdminStats(BaseModel):
    total_modules: int
    published_modules: int
    total_users: int
    total_attempts: int
    pass_rate: int
    total_groups: int
    total_pathways: int
