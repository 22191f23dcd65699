from pydantic import BaseModel


class HealthOut(BaseModel):
    status: str = "ok"
    timestamp: str
    uptime: float  # seconds since the app module was imported
    version: str
